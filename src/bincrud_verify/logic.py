from pathlib import Path

from bincrud_core.entities import ENTITY_KINDS, Item, User
from bincrud_core.errors import CorruptRecordError, TruncatedHeaderError
from bincrud_core.framing import read_frame, read_header
from bincrud_core.protocol import LONG_TEXT_BYTES
from .const import ERRORS, WARNINGS


def _error(code: str, **detail) -> dict:
    return {"code": code, "message": ERRORS[code], **detail}

def _warning(code: str, **detail) -> dict:
    return {"code": code, "message": WARNINGS[code], **detail}

def _primary_text(rec) -> str | None:
    if isinstance(rec, Item):
        return rec.content
    if isinstance(rec, User):
        return rec.username
    return None

def _finish(result: dict, errors: list, warnings: list) -> dict:
    result["status"] = "FAIL" if errors else "PASS"
    result["error_count"] = len(errors)
    result["errors"] = errors
    result["warnings"] = warnings
    return result

def verify_store_file(path: Path, kind: str) -> dict:
    """Scan a store file offline and report every structural problem found.

    Reads without the store lock; run it against files no store is writing.
    """
    entity_type = ENTITY_KINDS[kind]
    path = Path(path)
    errors: list[dict] = []
    warnings: list[dict] = []
    result = {"path": str(path), "kind": kind, "header_count": None, "records": 0, "corrupted_at": None}

    if not path.exists():
        errors.append(_error("E_FILE_MISSING", path=str(path)))
        return _finish(result, errors, warnings)

    size = path.stat().st_size
    with open(path, "rb") as f:
        try:
            header = read_header(f)
        except TruncatedHeaderError as e:
            errors.append(_error("E_HEADER_TRUNCATED", detail=str(e), size=size))
            return _finish(result, errors, warnings)
        except CorruptRecordError as e:
            errors.append(_error("E_HEADER_NEGATIVE", detail=str(e)))
            return _finish(result, errors, warnings)
        result["header_count"] = header.count

        for index in range(1, header.count + 1):
            offset = f.tell()
            try:
                payload = read_frame(f, size)
            except CorruptRecordError as e:
                errors.append(_error("E_FRAME_INVALID", record=index, offset=offset, detail=str(e)))
                result["corrupted_at"] = offset
                break
            try:
                rec = entity_type.from_bytes(payload)
            except CorruptRecordError as e:
                errors.append(_error("E_PAYLOAD_INVALID", record=index, offset=offset, detail=str(e)))
                result["corrupted_at"] = offset
                break
            result["records"] += 1

            text = _primary_text(rec)
            if text is not None:
                if not text:
                    warnings.append(_warning("W_EMPTY_TEXT", record=index))
                elif len(text.encode("utf-8")) > LONG_TEXT_BYTES:
                    warnings.append(_warning("W_LONG_TEXT", record=index, bytes=len(text.encode("utf-8"))))

        if result["records"] != header.count:
            errors.append(_error("E_COUNT_MISMATCH", expected=header.count, found=result["records"]))
        elif f.tell() < size:
            warnings.append(_warning("W_TRAILING_BYTES", offset=f.tell(), bytes=size - f.tell()))

    return _finish(result, errors, warnings)
