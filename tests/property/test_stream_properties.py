"""Property tests for chunked-response accumulation.

Fragment boundaries never line up with chunk boundaries on the wire, so the
aggregate result must not depend on how a body is split.
"""

from __future__ import annotations

import json

from hypothesis import given, settings, strategies as st

from midas_client.models.envelope import ApiResponse
from midas_client.streaming import (
    NO_RESPONSE_MESSAGE,
    ByteAccumulator,
    StreamAccumulator,
    StreamState,
)


# --- Strategies ---

messages = st.text(max_size=40)
payloads = st.one_of(
    st.text(max_size=20),
    st.integers(min_value=-(2**53), max_value=2**53),
    st.floats(min_value=-1e12, max_value=1e12, allow_nan=False),
)
codes = st.integers(min_value=0, max_value=65535)
failure_statuses = st.sampled_from(["failed", "error", "rejected"])
ascii_flags = st.booleans()


def _fragment(status: str, message: str, code: int, data, ensure_ascii: bool) -> bytes:
    body = {"status": status, "message": message, "code": code, "data": data}
    return json.dumps(body, ensure_ascii=ensure_ascii).encode("utf-8")


def _split(body: bytes, cuts: list[int]) -> list[bytes]:
    points = sorted({c % (len(body) + 1) for c in cuts})
    pieces, start = [], 0
    for point in points:
        pieces.append(body[start:point])
        start = point
    pieces.append(body[start:])
    return pieces


def _run(envelope_type, pieces: list[bytes]) -> StreamAccumulator:
    acc = StreamAccumulator(envelope_type)
    for piece in pieces:
        if acc.feed(piece) is not StreamState.READING:
            break
    acc.finish()
    return acc


# --- Last success wins regardless of chunking ---

@settings(max_examples=100)
@given(
    fragments=st.lists(st.tuples(messages, codes), min_size=1, max_size=5),
    cuts=st.lists(st.integers(min_value=0), max_size=12),
    ensure_ascii=ascii_flags,
    separator=st.sampled_from([b"", b"\n", b"\r\n", b"  "]),
)
def test_last_success_fragment_wins_for_any_chunking(fragments, cuts, ensure_ascii, separator):
    body = separator.join(
        _fragment("success", message, code, "", ensure_ascii) for message, code in fragments
    )
    acc = _run(ApiResponse[str], _split(body, cuts))

    assert acc.state == StreamState.COMPLETED
    assert acc.fragments == len(fragments)
    last_message, last_code = fragments[-1]
    assert acc.result.status == "success"
    assert acc.result.message == last_message
    assert acc.result.code == last_code


@settings(max_examples=100)
@given(
    data=payloads,
    cuts=st.lists(st.integers(min_value=0), max_size=12),
    ensure_ascii=ascii_flags,
)
def test_payload_survives_any_chunking(data, cuts, ensure_ascii):
    body = _fragment("success", "m", 200, data, ensure_ascii)
    envelope_type = ApiResponse[type(data)]
    acc = _run(envelope_type, _split(body, cuts))

    assert acc.result.data == data


# --- First failure terminates ---

@settings(max_examples=100)
@given(
    before=st.lists(messages, max_size=3),
    failure=st.tuples(failure_statuses, messages, codes),
    after=st.lists(messages, max_size=3),
    cuts=st.lists(st.integers(min_value=0), max_size=8),
)
def test_first_failure_is_the_result(before, failure, after, cuts):
    status, message, code = failure
    body = b"".join(
        [_fragment("success", m, 200, "", True) for m in before]
        + [_fragment(status, message, code, "", True)]
        + [_fragment("success", m, 200, "", True) for m in after]
    )
    acc = _run(ApiResponse[str], _split(body, cuts))

    assert acc.state == StreamState.TERMINATED
    assert acc.fragments == len(before) + 1
    assert acc.result.status == status
    assert acc.result.message == message
    assert acc.result.code == code


# --- Empty streams ---

@settings(max_examples=50)
@given(whitespace=st.lists(st.sampled_from([b"", b" ", b"\n", b"\t", b"\r\n"]), max_size=6))
def test_stream_without_fragments_synthesizes_failure(whitespace):
    acc = _run(ApiResponse[list[int]], whitespace)

    assert acc.state == StreamState.COMPLETED
    assert acc.result.status == "failed"
    assert acc.result.message == NO_RESPONSE_MESSAGE
    assert acc.result.code == 404
    assert acc.result.data == []


# --- Downloads ---

@settings(max_examples=100)
@given(chunks=st.lists(st.binary(max_size=64), max_size=10))
def test_download_concatenates_all_chunks(chunks):
    acc = ByteAccumulator()
    for chunk in chunks:
        acc.feed(chunk)
    result = acc.finish()

    expected = b"".join(chunks)
    assert acc.bytes_received == len(expected)
    if expected:
        assert result.status == "success"
        assert result.data == expected
    else:
        assert result.status == "failed"
        assert result.data == b""
