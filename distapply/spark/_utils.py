"""Shared Spark utilities: session handling, input checks, and package shipping."""

from __future__ import annotations

import logging
from pathlib import Path

from distapply.core.config import SessionConfig

log = logging.getLogger(__name__)

_SHIPPED_FILES: dict[str, set[str]] = {}


def is_spark_dataframe(data) -> bool:
    """Check if data is a PySpark DataFrame.

    Parameters
    ----------
    data : object
        Input data to check.

    Returns
    -------
    bool
        True if data is a ``pyspark.sql.DataFrame``.
    """
    try:
        from pyspark.sql import DataFrame as SparkDataFrame

        return isinstance(data, SparkDataFrame)
    except ImportError:
        _type_name = type(data).__module__ + "." + type(data).__qualname__
        if "pyspark" in _type_name.lower():
            raise ImportError(
                f"Input data appears to be a PySpark object ({_type_name}) but "
                "the spark extra is not installed. Install with: "
                "pip install 'distapply[spark]'"
            ) from None
        return False


def require_spark_dataframe(sdf, name="sdf"):
    """Raise ``TypeError`` unless ``sdf`` is a PySpark DataFrame."""
    if not is_spark_dataframe(sdf):
        raise TypeError(f"{name} must be a pyspark.sql.DataFrame, got {type(sdf).__name__}. Use copy_to() first.")


def validate_spark_input(sdf, required_cols):
    """Validate that a Spark DataFrame has the required columns.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        The Spark DataFrame to validate.
    required_cols : list of str
        Column names that must be present.

    Raises
    ------
    ValueError
        If any required columns are missing.
    """
    missing = [c for c in required_cols if c not in sdf.columns]
    if missing:
        raise ValueError(f"Columns not found in Spark DataFrame: {missing}")


def get_default_partitions(spark):
    """Compute default partition count from Spark default parallelism.

    Parameters
    ----------
    spark : pyspark.sql.SparkSession
        Active Spark session.

    Returns
    -------
    int
        Recommended number of partitions (default parallelism, minimum 1).
    """
    return max(spark.sparkContext.defaultParallelism, 1)


def get_or_create_spark(spark=None, config=None):
    """Get an existing SparkSession or create one from ``config``.

    Parameters
    ----------
    spark : pyspark.sql.SparkSession or None
        An existing Spark session. If None, attempts to get the active
        session or creates a new one.
    config : SessionConfig or None
        Settings for a new session. Ignored when a session already exists.

    Returns
    -------
    pyspark.sql.SparkSession
        A Spark session.
    """
    from pyspark.sql import SparkSession

    if spark is not None:
        return spark
    active = SparkSession.getActiveSession()
    if active is not None:
        return active

    config = config or SessionConfig()
    builder = SparkSession.builder.master(config.master).appName(config.app_name)
    for key, value in config.to_spark_conf().items():
        builder = builder.config(key, value)

    logging.getLogger("py4j").setLevel(logging.ERROR)
    session = builder.getOrCreate()
    log.info(
        "Started Spark session %r on %s (Arrow %s)",
        config.app_name,
        config.master,
        "on" if config.arrow_enabled else "off",
    )
    return session


def connect(master=None, app_name=None, config=None, **conf):
    """Connect to a cluster and return its Spark session.

    Parameters
    ----------
    master : str, optional
        Spark master URL, e.g. ``"local[4]"`` or ``"spark://host:7077"``.
    app_name : str, optional
        Application name.
    config : SessionConfig, optional
        Base settings; ``master``, ``app_name`` and ``conf`` override it.
    **conf
        Extra Spark conf entries. Use the full key through a dict, e.g.
        ``connect(**{"spark.executor.memory": "2g"})``.

    Returns
    -------
    pyspark.sql.SparkSession
    """
    config = config or SessionConfig()
    overrides = config.to_dict()
    if master is not None:
        overrides["master"] = master
    if app_name is not None:
        overrides["app_name"] = app_name
    overrides["extra_conf"] = {**config.extra_conf, **conf}
    return get_or_create_spark(config=SessionConfig(**overrides))


def _shipped_files(sc):
    """Return the paths already shipped to the running application.

    Only one SparkContext runs per process, so entries of other (stopped)
    applications are dropped.
    """
    for app_id in [a for a in _SHIPPED_FILES if a != sc.applicationId]:
        del _SHIPPED_FILES[app_id]
    return _SHIPPED_FILES.setdefault(sc.applicationId, set())


def distribute_packages(spark, paths):
    """Ship local Python files or archives to every worker.

    Each path is added once per Spark application; repeated calls with the
    same path are no-ops.

    Parameters
    ----------
    spark : pyspark.sql.SparkSession
        Active Spark session.
    paths : str, Path or list of those
        ``.py``, ``.zip`` or ``.egg`` files importable by the closure.

    Returns
    -------
    list of str
        Paths shipped by this call.

    Raises
    ------
    FileNotFoundError
        If a path does not exist.
    """
    if isinstance(paths, (str, Path)):
        paths = [paths]

    sc = spark.sparkContext
    shipped = _shipped_files(sc)
    added = []
    for path in paths:
        resolved = Path(path).expanduser().resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"Package path not found: {resolved}")
        key = str(resolved)
        if key in shipped:
            continue
        sc.addPyFile(key)
        shipped.add(key)
        added.append(key)

    if added:
        log.info("Shipped %d package file(s) to workers", len(added))
    return added
