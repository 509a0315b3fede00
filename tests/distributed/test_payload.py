"""Tests for pickled result transport."""

import pandas as pd

from distapply.core.config import PAYLOAD_COLUMN
from distapply.distributed import concat_frames, decode_payloads, empty_payload, encode_payload


def test_encode_payload_is_single_row(small_frame):
    payload = encode_payload(small_frame)
    assert list(payload.columns) == [PAYLOAD_COLUMN]
    assert len(payload) == 1
    assert isinstance(payload[PAYLOAD_COLUMN].iloc[0], bytes)


def test_decode_payloads_stacks_in_order(small_frame):
    first = encode_payload(small_frame.iloc[:2])[PAYLOAD_COLUMN].iloc[0]
    second = encode_payload(small_frame.iloc[2:])[PAYLOAD_COLUMN].iloc[0]
    out = decode_payloads([first, second])
    pd.testing.assert_frame_equal(out, small_frame.reset_index(drop=True))


def test_decode_skips_missing_payloads(small_frame):
    blob = encode_payload(small_frame)[PAYLOAD_COLUMN].iloc[0]
    assert len(decode_payloads([None, blob, None])) == len(small_frame)


def test_decode_nothing_is_empty():
    assert decode_payloads([]).empty


def test_empty_payload_has_no_rows():
    payload = empty_payload()
    assert list(payload.columns) == [PAYLOAD_COLUMN]
    assert len(payload) == 0


def test_concat_frames_resets_index():
    out = concat_frames([pd.DataFrame({"a": [1]}, index=[7]), None])
    assert out.index.tolist() == [0]
