"""CSV import/export utilities."""

import csv
from pathlib import Path

from ligapro.models import DEFAULT_RATING, RankingEntry


class CSVImportError(Exception):
    """Error during CSV import."""
    pass


RANKING_COLUMNS = [
    "position",
    "name",
    "nickname",
    "points",
    "elo_rating",
    "wins",
    "losses",
    "win_rate",
    "sb_score",
]


def validate_player_row(row: dict, row_num: int) -> dict:
    """Validate a player row from CSV.

    Args:
        row: Dictionary with CSV columns
        row_num: Row number for error messages

    Returns:
        Validated dictionary with cleaned data

    Raises:
        CSVImportError: If validation fails
    """
    name = (row.get("name") or "").strip()
    if not name:
        raise CSVImportError(f"Row {row_num}: Missing required field 'name'")

    validated = {
        "name": name,
        "nickname": (row.get("nickname") or "").strip(),
        "elo_rating": DEFAULT_RATING,
    }

    raw_rating = (row.get("elo_rating") or "").strip()
    if raw_rating:
        try:
            validated["elo_rating"] = int(raw_rating)
        except ValueError:
            raise CSVImportError(
                f"Row {row_num}: 'elo_rating' must be an integer, got '{raw_rating}'"
            )
        if validated["elo_rating"] <= 0:
            raise CSVImportError(f"Row {row_num}: 'elo_rating' must be positive")

    return validated


def import_players_csv(csv_path: str, skip_duplicates: bool = True) -> list[dict]:
    """Read players from a CSV file.

    CSV format:
        name,nickname,elo_rating
        Joao Silva,Joaozinho,1000

    Only 'name' is required.

    Args:
        csv_path: Path to CSV file
        skip_duplicates: Skip rows repeating an earlier name

    Returns:
        List of validated row dicts (name, nickname, elo_rating)

    Raises:
        CSVImportError: If file not found or validation fails
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise CSVImportError(f"CSV file not found: {csv_path}")

    players = []
    seen_names = set()

    with open(csv_file, "r", encoding="utf-8") as f:
        reader = csv.DictReader(f)

        if "name" not in (reader.fieldnames or []):
            raise CSVImportError("CSV missing required column: name")

        for row_num, row in enumerate(reader, start=2):  # Row 1 is the header
            validated = validate_player_row(row, row_num)
            key = validated["name"].lower()
            if key in seen_names:
                if skip_duplicates:
                    continue
                raise CSVImportError(f"Row {row_num}: Duplicate player '{validated['name']}'")
            seen_names.add(key)
            players.append(validated)

    return players


def export_rankings_csv(entries: list[RankingEntry], out_path: str) -> Path:
    """Write a ranking snapshot to CSV.

    Args:
        entries: Output of ranking.get_rankings
        out_path: Destination file (parent directories are created)

    Returns:
        Path of the written file
    """
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=RANKING_COLUMNS)
        writer.writeheader()
        for entry in entries:
            player = entry.player
            writer.writerow(
                {
                    "position": entry.position,
                    "name": player.name,
                    "nickname": player.nickname,
                    "points": player.points,
                    "elo_rating": player.elo_rating,
                    "wins": player.wins,
                    "losses": player.losses,
                    "win_rate": f"{player.win_rate:.3f}",
                    "sb_score": entry.sb_score,
                }
            )

    return path
