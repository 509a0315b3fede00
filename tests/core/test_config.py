"""Tests for session configuration."""

import pytest

from distapply.core.config import (
    APPLY_FAMILY,
    ARROW_ENABLED_KEY,
    SHUFFLE_PARTITIONS_KEY,
    Granularity,
    ResultMode,
    SessionConfig,
)


def test_default_conf_enables_arrow():
    conf = SessionConfig().to_spark_conf()
    assert conf[ARROW_ENABLED_KEY] == "true"
    assert SHUFFLE_PARTITIONS_KEY not in conf


def test_conf_includes_overrides():
    config = SessionConfig(arrow_enabled=False, shuffle_partitions=4, extra_conf={"spark.executor.memory": "2g"})
    conf = config.to_spark_conf()
    assert conf[ARROW_ENABLED_KEY] == "false"
    assert conf[SHUFFLE_PARTITIONS_KEY] == "4"
    assert conf["spark.executor.memory"] == "2g"


def test_non_positive_shuffle_partitions_raises():
    with pytest.raises(ValueError, match="shuffle_partitions"):
        SessionConfig(shuffle_partitions=0).to_spark_conf()


def test_to_dict_round_trip():
    config = SessionConfig(master="local[2]")
    assert SessionConfig(**config.to_dict()) == config


def test_apply_family_table():
    assert len(APPLY_FAMILY) == 6
    assert APPLY_FAMILY["gapply_collect"] == (Granularity.GROUP, ResultMode.LOCAL)
    assert APPLY_FAMILY["dapply"] == (Granularity.PARTITION, ResultMode.DISTRIBUTED)
    assert APPLY_FAMILY["spark_lapply"][0] is Granularity.ELEMENT
