"""Sensu check result records and decoding of the /results payload."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

# Sensu status codes
STATUS_OK = 0
STATUS_WARNING = 1
STATUS_CRITICAL = 2


@dataclass(frozen=True)
class Check:
    name: str = ""
    status: int = STATUS_OK
    output: str = ""
    duration: float = 0.0
    executed: int = 0
    issued: int = 0
    interval: int = 0
    subscribers: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CheckResult:
    client: str = ""
    check: Check = field(default_factory=Check)


class DecodeError(ValueError):
    pass


def _fold(obj: Dict[str, Any]) -> Dict[str, Any]:
    # Sensu emits lowercase keys, older tooling emits Go-style capitalized ones
    folded: Dict[str, Any] = {}
    for k, v in obj.items():
        folded.setdefault(str(k).lower(), v)
    return folded


def _str(obj: Dict[str, Any], key: str) -> str:
    v = obj.get(key)
    if v is None:
        return ""
    if not isinstance(v, str):
        raise DecodeError(f"field {key!r}: expected string, got {type(v).__name__}")
    return v


def _int(obj: Dict[str, Any], key: str) -> int:
    v = obj.get(key)
    if v is None:
        return 0
    if isinstance(v, bool) or not isinstance(v, int):
        raise DecodeError(f"field {key!r}: expected integer, got {type(v).__name__}")
    return v


def _float(obj: Dict[str, Any], key: str) -> float:
    v = obj.get(key)
    if v is None:
        return 0.0
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise DecodeError(f"field {key!r}: expected number, got {type(v).__name__}")
    return float(v)


def _str_list(obj: Dict[str, Any], key: str) -> Tuple[str, ...]:
    v = obj.get(key)
    if v is None:
        return ()
    if not isinstance(v, list) or not all(isinstance(s, str) for s in v):
        raise DecodeError(f"field {key!r}: expected list of strings")
    return tuple(v)


def decode_check(raw: Any) -> Check:
    if raw is None:
        return Check()
    if not isinstance(raw, dict):
        raise DecodeError(f"check: expected object, got {type(raw).__name__}")
    obj = _fold(raw)
    return Check(
        name=_str(obj, "name"),
        status=_int(obj, "status"),
        output=_str(obj, "output"),
        duration=_float(obj, "duration"),
        executed=_int(obj, "executed"),
        issued=_int(obj, "issued"),
        interval=_int(obj, "interval"),
        subscribers=_str_list(obj, "subscribers"),
    )


def decode_result(raw: Any) -> CheckResult:
    if not isinstance(raw, dict):
        raise DecodeError(f"result: expected object, got {type(raw).__name__}")
    obj = _fold(raw)
    return CheckResult(client=_str(obj, "client"), check=decode_check(obj.get("check")))


def decode_results(payload: Any) -> List[CheckResult]:
    """Decode a parsed ``GET /results`` body.

    Keys match case-insensitively and absent fields take zero values. A
    non-array body or a field of the wrong JSON type raises ``DecodeError``.
    """
    if not isinstance(payload, list):
        raise DecodeError(f"expected JSON array, got {type(payload).__name__}")
    results = []
    for i, raw in enumerate(payload):
        try:
            results.append(decode_result(raw))
        except DecodeError as e:
            raise DecodeError(f"results[{i}]: {e}") from e
    return results
