#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Measurement Log Parser Module

Tokenizes, classifies, validates and decodes one line of the measurement log.

Record shapes (fields separated by whitespace):
    IMU <t> <wx> <wy> <wz> <ax> <ay> <az>
    CONTACT <t> <id_1> <ind_1> [<id_2> <ind_2> ...]
    KINEMATIC <t> <id_1> <qw_1> <qx_1> <qy_1> <qz_1> <px_1> <py_1> <pz_1> <cov_1..36> [<id_2> ...]

Parsing is pure: the same line always decodes to the same values. Structural
problems (field count, unparseable numbers) raise RecordFormatError; unknown
tags decode to an UnrecognizedRecord and are never an error.

Author: Replay project
"""

from typing import List, Sequence

import numpy as np

from .math_utils import quat_normalize, quat_to_rot, make_transform
from .records import (
    RecordKind, RECORD_TAGS, IMU_FIELDS, CONTACT_PAIR_FIELDS,
    KINEMATIC_BLOCK_FIELDS, ImuMeasurement, ContactMeasurement,
    KinematicEntry, KinematicMeasurement, UnrecognizedRecord, ParsedRecord,
)


class RecordFormatError(ValueError):
    """Structural error in a recognized record. Fatal for the replay."""

    def __init__(self, message: str, line_no: int = 0, line: str = ""):
        self.line_no = line_no
        self.line = line
        prefix = f"line {line_no}: " if line_no else ""
        super().__init__(prefix + message)


# =============================================================================
# Tokenizer / Classifier
# =============================================================================

def tokenize(line: str) -> List[str]:
    """Split on runs of whitespace. Empty or blank line -> []."""
    return line.split()


def classify(tokens: Sequence[str]) -> RecordKind:
    if not tokens:
        return RecordKind.UNRECOGNIZED
    return RECORD_TAGS.get(tokens[0], RecordKind.UNRECOGNIZED)


def validate_arity(kind: RecordKind, tokens: Sequence[str]) -> None:
    """
    Check the field count after tag + timestamp against the kind's arity.

    Raises:
        RecordFormatError: on any mismatch for a recognized kind
    """
    if kind == RecordKind.UNRECOGNIZED:
        return
    if len(tokens) < 2:
        raise RecordFormatError(f"{tokens[0]} record has no timestamp")

    n = len(tokens) - 2
    if kind == RecordKind.IMU:
        if n != IMU_FIELDS:
            raise RecordFormatError(
                f"IMU record needs {IMU_FIELDS} fields after timestamp, got {n}")
    elif kind == RecordKind.CONTACT:
        if n % CONTACT_PAIR_FIELDS != 0:
            raise RecordFormatError(
                f"CONTACT record needs id/indicator pairs, got {n} fields")
    elif kind == RecordKind.KINEMATIC:
        if n == 0 or n % KINEMATIC_BLOCK_FIELDS != 0:
            raise RecordFormatError(
                f"KINEMATIC record needs a positive multiple of {KINEMATIC_BLOCK_FIELDS} "
                f"fields after timestamp, got {n}")


# =============================================================================
# Field Conversion
# =============================================================================

def _to_float(token: str, what: str) -> float:
    # float() would accept digit separators like "1_0"
    if "_" in token:
        raise RecordFormatError(f"{what}: cannot parse {token!r} as float")
    try:
        return float(token)
    except ValueError:
        raise RecordFormatError(f"{what}: cannot parse {token!r} as float") from None


def _to_int(token: str, what: str) -> int:
    if "_" in token:
        raise RecordFormatError(f"{what}: cannot parse {token!r} as integer")
    try:
        return int(token)
    except ValueError:
        raise RecordFormatError(f"{what}: cannot parse {token!r} as integer") from None


def _to_floats(tokens: Sequence[str], what: str) -> np.ndarray:
    return np.array([_to_float(tok, what) for tok in tokens], dtype=np.float64)


# =============================================================================
# Typed Decoders
# =============================================================================

def decode_imu(tokens: Sequence[str]) -> ImuMeasurement:
    """Tokens 2..7 -> (wx, wy, wz, ax, ay, az)."""
    t = _to_float(tokens[1], "IMU timestamp")
    vals = _to_floats(tokens[2:2 + IMU_FIELDS], "IMU sample")
    return ImuMeasurement(t=t, ang=vals[0:3], lin=vals[3:6])


def decode_contacts(tokens: Sequence[str]) -> ContactMeasurement:
    """
    Decode (id, indicator) pairs in log order.

    The indicator is read as a float and is True for any nonzero value,
    negative included.
    """
    t = _to_float(tokens[1], "CONTACT timestamp")
    body = tokens[2:]
    contacts = []
    for i in range(0, len(body), CONTACT_PAIR_FIELDS):
        contact_id = _to_int(body[i], "CONTACT id")
        indicator = _to_float(body[i + 1], "CONTACT indicator") != 0.0
        contacts.append((contact_id, indicator))
    return ContactMeasurement(t=t, contacts=contacts)


def decode_kinematic_block(block: Sequence[str]) -> KinematicEntry:
    """
    Decode one 44-field block: id, quaternion (w,x,y,z), position, covariance.

    The quaternion is normalized before conversion. Covariance entry (j, k)
    is block[8 + j*6 + k].
    """
    if len(block) != KINEMATIC_BLOCK_FIELDS:
        raise RecordFormatError(
            f"KINEMATIC block needs {KINEMATIC_BLOCK_FIELDS} fields, got {len(block)}")
    body_id = _to_int(block[0], "KINEMATIC id")
    q = quat_normalize(_to_floats(block[1:5], "KINEMATIC quaternion"))
    p = _to_floats(block[5:8], "KINEMATIC position")
    cov = _to_floats(block[8:44], "KINEMATIC covariance").reshape(6, 6)
    return KinematicEntry(id=body_id, pose=make_transform(quat_to_rot(q), p), cov=cov)


def decode_kinematics(tokens: Sequence[str]) -> KinematicMeasurement:
    t = _to_float(tokens[1], "KINEMATIC timestamp")
    remaining = list(tokens[2:])
    entries = []
    while remaining:
        block, remaining = remaining[:KINEMATIC_BLOCK_FIELDS], remaining[KINEMATIC_BLOCK_FIELDS:]
        entries.append(decode_kinematic_block(block))
    return KinematicMeasurement(t=t, entries=entries)


def decode_unrecognized(tokens: Sequence[str]) -> UnrecognizedRecord:
    """Keep the timestamp when the second token happens to be numeric."""
    if not tokens:
        return UnrecognizedRecord(tag="")
    t = None
    if len(tokens) >= 2:
        try:
            t = _to_float(tokens[1], "timestamp")
        except ValueError:
            t = None
    return UnrecognizedRecord(tag=tokens[0], t=t)


_DECODERS = {
    RecordKind.IMU: decode_imu,
    RecordKind.CONTACT: decode_contacts,
    RecordKind.KINEMATIC: decode_kinematics,
    RecordKind.UNRECOGNIZED: decode_unrecognized,
}


def parse_tokens(tokens: Sequence[str]) -> ParsedRecord:
    kind = classify(tokens)
    validate_arity(kind, tokens)
    return ParsedRecord(kind=kind, measurement=_DECODERS[kind](tokens))


def parse_line(line: str, line_no: int = 0) -> ParsedRecord:
    """
    Tokenize, classify, validate and decode one log line.

    Args:
        line: Raw text line (trailing newline allowed)
        line_no: 1-based line number for error messages

    Returns:
        ParsedRecord with the decoded measurement

    Raises:
        RecordFormatError: structural error in a recognized record
    """
    try:
        record = parse_tokens(tokenize(line))
    except RecordFormatError as e:
        raise RecordFormatError(str(e), line_no=line_no, line=line.rstrip("\n")) from None
    record.line_no = line_no
    return record
