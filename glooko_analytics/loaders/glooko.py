"""
Glooko export loader.

Parses the CSV files of a Glooko export (ZIP or extracted folder) into
GlucoseReading and InsulinReading lists.

Every Glooko CSV has the same preamble:
    line 0: export metadata (patient name, date range)
    line 1: column headers
    line 2+: data rows
Files are tab-separated by default; some exports use commas.
Timestamps come back as naive local wall-clock times; UTC offsets are dropped.
"""

import logging
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd

from glooko_analytics.loaders.columns import find_column
from glooko_analytics.metrics.glucose_metrics import GlucoseReading
from glooko_analytics.metrics.insulin_metrics import DailyInsulinSummary, InsulinReading, InsulinType

logger = logging.getLogger(__name__)

GLUCOSE_SOURCES = ('cgm', 'bg')


def detect_delimiter(csv_text: str) -> str:
    """Detect the delimiter from the header line (line 1).

    Returns ',' only when commas strictly outnumber tabs, otherwise tab.
    """
    if not isinstance(csv_text, str):
        raise TypeError(f"CSV content must be str, got {type(csv_text).__name__}")
    lines = csv_text.strip().splitlines()
    if len(lines) < 2:
        return '\t'
    header = lines[1]
    return ',' if header.count(',') > header.count('\t') else '\t'


def _read_table(csv_text: str, delimiter: str) -> Tuple[List[str], List[List[str]]]:
    """Split CSV text into header fields and data rows, skipping the metadata line."""
    if not isinstance(csv_text, str):
        raise TypeError(f"CSV content must be str, got {type(csv_text).__name__}")

    lines = csv_text.strip().splitlines()
    if len(lines) < 2:
        return [], []

    headers = [h.strip() for h in lines[1].split(delimiter)]
    rows = [line.strip().split(delimiter) for line in lines[2:] if line.strip()]
    return headers, rows


def _column(rows: List[List[str]], index: int) -> pd.Series:
    return pd.Series(
        [row[index].strip() if index < len(row) else None for row in rows],
        dtype=object,
    )


def _parse_timestamp(value: Optional[str]) -> Optional[pd.Timestamp]:
    if not isinstance(value, str) or not value:
        return None
    ts = pd.to_datetime(value, errors='coerce')
    return None if pd.isna(ts) else ts


def _to_timestamps_by_cell(raw: pd.Series) -> pd.Series:
    """Per-cell parse for columns that mix UTC offsets or tz-awareness.

    Rows whose tz-awareness differs from the majority become NaT (a tie
    keeps the naive rows). Aware rows keep their local wall-clock time.
    """
    parsed = [_parse_timestamp(value) for value in raw]
    valid = [ts for ts in parsed if ts is not None]
    aware_count = sum(1 for ts in valid if ts.tzinfo is not None)
    keep_aware = aware_count > len(valid) - aware_count

    cleaned = []
    for ts in parsed:
        if ts is None or (ts.tzinfo is not None) != keep_aware:
            cleaned.append(pd.NaT)
        else:
            cleaned.append(ts.tz_localize(None) if keep_aware else ts)

    dropped = len(valid) - sum(1 for ts in cleaned if ts is not pd.NaT)
    if dropped:
        logger.debug("Dropped %d timestamps whose timezone does not match the file", dropped)
    return pd.to_datetime(pd.Series(cleaned, index=raw.index, dtype=object))


def _to_timestamps(raw: pd.Series) -> pd.Series:
    """Parse a timestamp column to naive local wall-clock times."""
    try:
        parsed = pd.to_datetime(raw, format='mixed', errors='coerce')
    except ValueError:
        # Mixed offsets (DST changes) or naive and aware rows in one file
        return _to_timestamps_by_cell(raw)
    if not pd.api.types.is_datetime64_any_dtype(parsed):
        # Older pandas returns an object column for mixed offsets
        return _to_timestamps_by_cell(raw)
    if parsed.dt.tz is not None:
        parsed = parsed.dt.tz_localize(None)
    return parsed


def _to_numbers(raw: pd.Series, delimiter: str) -> pd.Series:
    # German exports write decimal commas when the file is tab-separated
    if delimiter != ',':
        raw = raw.str.replace(',', '.', regex=False)
    return pd.to_numeric(raw, errors='coerce')


def parse_glucose_readings(csv_text: str, delimiter: str = '\t') -> List[GlucoseReading]:
    """Parse glucose readings (mmol/L) from one Glooko CSV file.

    Rows with an unparseable timestamp, a non-numeric value or a value <= 0
    are skipped. A file without a timestamp or glucose column yields [].

    Args:
        csv_text: Full file content.
        delimiter: Field separator, tab by default.

    Returns:
        Readings in file order.

    Raises:
        TypeError: If csv_text is not a string.
    """
    headers, rows = _read_table(csv_text, delimiter)
    if not rows:
        return []

    ts_index = find_column(headers, 'timestamp')
    value_index = find_column(headers, 'glucose_value')
    if ts_index == -1 or value_index == -1:
        logger.debug("No timestamp/glucose columns in headers %s", headers)
        return []

    timestamps = _to_timestamps(_column(rows, ts_index))
    values = _to_numbers(_column(rows, value_index), delimiter)
    valid = timestamps.notna() & values.notna() & (values > 0)

    skipped = int((~valid).sum())
    if skipped:
        logger.debug("Skipped %d of %d glucose rows", skipped, len(rows))

    return [
        GlucoseReading(timestamp=ts.to_pydatetime(), value=float(v))
        for ts, v in zip(timestamps[valid], values[valid])
    ]


def parse_insulin_readings(
    csv_text: str,
    delimiter: str = '\t',
    insulin_type: InsulinType = 'bolus'
) -> List[InsulinReading]:
    """Parse insulin deliveries from a basal or bolus CSV file.

    Rows with an unparseable timestamp or a negative/non-numeric dose are skipped.
    """
    headers, rows = _read_table(csv_text, delimiter)
    if not rows:
        return []

    ts_index = find_column(headers, 'timestamp')
    dose_index = find_column(headers, 'dose')
    if ts_index == -1 or dose_index == -1:
        logger.debug("No timestamp/dose columns in headers %s", headers)
        return []

    timestamps = _to_timestamps(_column(rows, ts_index))
    doses = _to_numbers(_column(rows, dose_index), delimiter)
    valid = timestamps.notna() & doses.notna() & (doses >= 0)

    skipped = int((~valid).sum())
    if skipped:
        logger.debug("Skipped %d of %d %s rows", skipped, len(rows), insulin_type)

    return [
        InsulinReading(timestamp=ts.to_pydatetime(), insulin_type=insulin_type, units=float(d))
        for ts, d in zip(timestamps[valid], doses[valid])
    ]


def parse_daily_insulin_totals(csv_text: str, delimiter: str = '\t') -> List[DailyInsulinSummary]:
    """Parse the combined insulin file (one row of daily totals per day).

    Missing total columns count as 0; a missing total insulin column is
    derived as basal + bolus.
    """
    headers, rows = _read_table(csv_text, delimiter)
    if not rows:
        return []

    ts_index = find_column(headers, 'timestamp')
    if ts_index == -1:
        return []

    frame = pd.DataFrame({'timestamp': _to_timestamps(_column(rows, ts_index))})
    for column_type in ('total_bolus', 'total_basal', 'total_insulin'):
        index = find_column(headers, column_type)
        if index == -1:
            frame[column_type] = float('nan') if column_type == 'total_insulin' else 0.0
        else:
            frame[column_type] = _to_numbers(_column(rows, index), delimiter).fillna(0.0)

    frame = frame.dropna(subset=['timestamp'])
    frame['total_insulin'] = frame['total_insulin'].fillna(frame['total_basal'] + frame['total_bolus'])

    return [
        DailyInsulinSummary(
            date=row.timestamp.strftime('%Y-%m-%d'),
            basal_total=round(float(row.total_basal), 1),
            bolus_total=round(float(row.total_bolus), 1),
            total_insulin=round(float(row.total_insulin), 1),
        )
        for row in frame.itertuples(index=False)
    ]


def merge_readings(sources: Iterable[str]) -> List[GlucoseReading]:
    """Parse several CSV files and concatenate the readings in source order.

    Each source gets its own delimiter detection. No deduplication, no sorting.
    """
    readings: List[GlucoseReading] = []
    for csv_text in sources:
        readings.extend(parse_glucose_readings(csv_text, detect_delimiter(csv_text)))
    return readings


def merge_insulin_readings(sources: Iterable[str], insulin_type: InsulinType) -> List[InsulinReading]:
    """Insulin counterpart of merge_readings."""
    readings: List[InsulinReading] = []
    for csv_text in sources:
        readings.extend(parse_insulin_readings(csv_text, detect_delimiter(csv_text), insulin_type))
    return readings


class GlookoExportLoader:
    """Loader for Glooko data exports.

    A Glooko export is a ZIP archive of CSV datasets:
    - cgm_data_N.csv: continuous glucose monitor readings
    - bg_data_N.csv: fingerstick blood glucose readings
    - basal_data_N.csv / bolus_data_N.csv: insulin deliveries
    - insulin_data_N.csv: daily insulin totals

    Large datasets are split into numbered parts, which are merged in
    part order. The extracted folder of an export works the same way.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize loader with the export path.

        Args:
            path: Path to a Glooko export ZIP or extracted folder.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Glooko export not found: {self.path}")
        self._df: Optional[pd.DataFrame] = None

    @property
    def is_zip(self) -> bool:
        return self.path.is_file()

    def list_files(self) -> List[str]:
        """Names of all CSV files in the export."""
        if self.is_zip:
            with zipfile.ZipFile(self.path) as archive:
                names = archive.namelist()
        else:
            names = [p.relative_to(self.path).as_posix() for p in self.path.rglob('*') if p.is_file()]
        return sorted(n for n in names if n.lower().endswith('.csv'))

    def find_dataset_files(self, dataset: str) -> List[str]:
        """Files of a dataset sorted by part number.

        Falls back to the first CSV whose name contains the dataset name.
        """
        pattern = re.compile(rf'(?:^|/){re.escape(dataset)}_data_(\d+)\.csv$', re.IGNORECASE)
        names = self.list_files()

        parts = []
        for name in names:
            match = pattern.search(name)
            if match:
                parts.append((int(match.group(1)), name))
        if parts:
            return [name for _, name in sorted(parts)]

        fallback = [n for n in names if dataset.lower() in Path(n).name.lower()]
        return fallback[:1]

    def read_text(self, name: str) -> str:
        """Read one file of the export as text."""
        if self.is_zip:
            with zipfile.ZipFile(self.path) as archive:
                raw = archive.read(name)
        else:
            raw = (self.path / name).read_bytes()
        return raw.decode('utf-8-sig')

    def _read_dataset(self, dataset: str) -> List[str]:
        files = self.find_dataset_files(dataset)
        if files:
            logger.info("Reading %s dataset from %s", dataset, ", ".join(files))
        else:
            logger.info("No %s dataset in %s", dataset, self.path)
        return [self.read_text(name) for name in files]

    def load_glucose(self, source: str = 'cgm') -> List[GlucoseReading]:
        """Load glucose readings from the CGM or fingerstick dataset.

        Args:
            source: 'cgm' or 'bg'.

        Returns:
            Readings in file order; [] when the dataset is absent.
        """
        if source not in GLUCOSE_SOURCES:
            raise ValueError(f"Unknown glucose source '{source}', expected one of {GLUCOSE_SOURCES}")
        return merge_readings(self._read_dataset(source))

    def load_insulin(self) -> List[InsulinReading]:
        """Load basal and bolus deliveries, ordered by timestamp."""
        readings = (
            merge_insulin_readings(self._read_dataset('basal'), 'basal')
            + merge_insulin_readings(self._read_dataset('bolus'), 'bolus')
        )
        return sorted(readings, key=lambda r: r.timestamp)

    def load_daily_insulin(self) -> List[DailyInsulinSummary]:
        """Daily insulin totals from the combined insulin file.

        Returns [] when the export has no combined insulin file.
        """
        sources = self._read_dataset('insulin')
        if not sources:
            return []
        return parse_daily_insulin_totals(sources[0], detect_delimiter(sources[0]))

    def glucose_frame(self, source: str = 'cgm') -> pd.DataFrame:
        """Load glucose readings as a DataFrame.

        Returns:
            DataFrame with columns: timestamp, glucose_mmol_l, sorted by timestamp.
        """
        readings = self.load_glucose(source)
        df = pd.DataFrame(
            {
                'timestamp': pd.to_datetime([r.timestamp for r in readings]),
                'glucose_mmol_l': [r.value for r in readings],
            }
        )
        self._df = df.sort_values('timestamp', kind='stable').reset_index(drop=True)
        return self._df

    @property
    def df(self) -> pd.DataFrame:
        """CGM DataFrame (loads on first access)."""
        if self._df is None:
            self._df = self.glucose_frame()
        return self._df

    def get_date_range(self) -> Optional[Tuple[datetime, datetime]]:
        """First and last CGM timestamp, or None when there is no data."""
        df = self.df
        if df.empty:
            return None
        return (
            df['timestamp'].min().to_pydatetime(),
            df['timestamp'].max().to_pydatetime(),
        )

    def get_readings_count(self) -> int:
        """Get total number of CGM readings."""
        return len(self.df)
