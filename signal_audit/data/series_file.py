"""
Local series files - reads an asset's daily history into an AssetAuditInput.

Supported layouts:

- JSON object: ``{"symbol", "name", "market", "times", "closes", "volumes"}``
  or the same header with ``"rows": [{"timestamp", "close", "volume"}, ...]``
- JSON list of ``{"timestamp", "close", "volume"}`` rows
- CSV with ``timestamp,close,volume`` columns

Timestamps may be ISO-8601 strings or epoch seconds/milliseconds. Rows are
sorted ascending; rows without a finite close are dropped. A missing or
non-finite volume is kept as None.
"""
import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from signal_audit.models import AssetAuditInput
from signal_audit.scoring.markets import resolve_score_market
from signal_audit.utils.exceptions import DataLoadError
from signal_audit.utils.numeric import to_float

EPOCH_MS_THRESHOLD = 10_000_000_000


def parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw.astimezone(timezone.utc) if raw.tzinfo else raw.replace(tzinfo=timezone.utc)

    numeric = to_float(raw)
    if numeric is not None:
        if abs(numeric) >= EPOCH_MS_THRESHOLD:
            numeric /= 1000
        return datetime.fromtimestamp(numeric, tz=timezone.utc)

    text = str(raw or "").strip()
    if not text:
        raise ValueError("empty timestamp")
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    return parsed.astimezone(timezone.utc) if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _rows_from_arrays(payload: dict[str, Any]) -> list[dict[str, Any]]:
    times = payload.get("times") or payload.get("timestamps") or []
    closes = payload.get("closes") or []
    volumes = payload.get("volumes") or []
    n = min(len(times), len(closes))
    return [
        {
            "timestamp": times[i],
            "close": closes[i],
            "volume": volumes[i] if i < len(volumes) else None,
        }
        for i in range(n)
    ]


def _read_json(path: Path) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    with path.open(encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, list):
        return {}, payload
    if isinstance(payload, dict):
        rows = payload.get("rows")
        if rows is None:
            rows = _rows_from_arrays(payload)
        return payload, rows
    raise DataLoadError("expected a JSON object or list", str(path))


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        fields = {name.strip().lower() for name in reader.fieldnames or []}
        missing = {"timestamp", "close"} - fields
        if missing:
            raise DataLoadError(f"missing columns: {', '.join(sorted(missing))}", str(path))
        return [
            {(key or "").strip().lower(): value for key, value in row.items()}
            for row in reader
        ]


def load_series_file(path: Path, market: Optional[str] = None) -> AssetAuditInput:
    """
    Load one asset's daily series from disk.

    Args:
        path: JSON or CSV file
        market: Market override; otherwise the file's market field, then the
            symbol suffix, then DEFAULT

    Returns:
        AssetAuditInput with ascending times and aligned closes/volumes

    Raises:
        DataLoadError: If the file is missing, malformed or has no usable rows
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError("file not found", str(path))

    try:
        if path.suffix.lower() == ".csv":
            header, rows = {}, _read_csv(path)
        else:
            header, rows = _read_json(path)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DataLoadError(str(e), str(path)) from e

    parsed: list[tuple[datetime, float, Optional[float]]] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        close = to_float(row.get("close"))
        if close is None:
            continue
        try:
            ts = parse_timestamp(row.get("timestamp", row.get("time")))
        except (ValueError, OverflowError, OSError):
            logger.debug(f"{path.name}: skipping row with bad timestamp {row.get('timestamp')!r}")
            continue
        parsed.append((ts, close, to_float(row.get("volume"))))

    if not parsed:
        raise DataLoadError("no rows with a timestamp and a finite close", str(path))

    parsed.sort(key=lambda r: r[0])

    symbol = str(header.get("symbol") or path.stem).strip()
    name = str(header.get("name") or symbol).strip()
    resolved = resolve_score_market(market or header.get("market"), symbol)

    try:
        asset = AssetAuditInput(
            symbol=symbol,
            name=name,
            market=resolved,
            times=[ts for ts, _, _ in parsed],
            closes=[close for _, close, _ in parsed],
            volumes=[volume for _, _, volume in parsed],
        )
    except ValidationError as e:
        raise DataLoadError(str(e), str(path)) from e

    logger.debug(f"Loaded {symbol} ({resolved.value}): {asset.length} rows from {path}")
    return asset
