"""Command-line interface for ligapro."""

import click

from ligapro import __version__


def _load_settings(config_path):
    from ligapro.config_loader import default_config, load_and_validate_config

    if config_path:
        return load_and_validate_config(config_path)
    return default_config()


def _open_store(ctx):
    """Open the store configured on the group, creating tables on first use."""
    from ligapro.storage import LeagueStore

    cfg = ctx.obj["config"]
    return LeagueStore.from_path(ctx.obj.get("db") or cfg["db_path"])


def _player_label(store, player_id):
    if player_id is None:
        return "---"
    player = store.get_player(player_id)
    return player.name if player else f"#{player_id}"


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", required=False, help="Path to config YAML file")
@click.option("--db", required=False, help="SQLite database path (overrides config)")
@click.pass_context
def cli(ctx, config_path: str, db: str):
    """LigaPro - league manager with tournaments, Elo and points rankings."""
    from ligapro.config_loader import ConfigError
    from ligapro.logger import setup_logger

    try:
        cfg = _load_settings(config_path)
    except ConfigError as e:
        click.echo(f"[ERROR] Configuration Error: {e}", err=True)
        raise click.Abort()

    setup_logger("ligapro", level=cfg["log_level"], log_file=cfg["log_file"])
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["db"] = db


@cli.command()
@click.pass_context
def init_db(ctx):
    """Create the database tables and default settings."""
    store = _open_store(ctx)
    cfg = ctx.obj["config"]
    settings = store.update_settings(cfg["ranking_mode"])
    click.echo(f"[SUCCESS] Database ready (ranking mode: {settings.ranking_mode.value})")


@cli.command()
@click.option("--name", required=True, help="Player name")
@click.option("--nickname", default="", help="Optional nickname")
@click.pass_context
def add_player(ctx, name: str, nickname: str):
    """Register a player.

    Example:
        ligapro add-player --name "Joao Silva" --nickname Joaozinho
    """
    store = _open_store(ctx)
    player = store.create_player(name.strip(), nickname.strip())
    click.echo(f"[SUCCESS] Player #{player.id} {player.name} registered")


@cli.command()
@click.option("--csv", "csv_path", required=True, help="Path to players CSV file")
@click.pass_context
def import_players(ctx, csv_path: str):
    """Import players from CSV file.

    CSV must have a 'name' column; 'nickname' and 'elo_rating' are optional.

    Example:
        ligapro import-players --csv data/players.csv
    """
    from ligapro.io_csv import CSVImportError, import_players_csv

    try:
        click.echo(f"[INFO] Reading CSV file: {csv_path}")
        rows = import_players_csv(csv_path)
    except CSVImportError as e:
        click.echo(f"[ERROR] CSV Import Error: {e}", err=True)
        raise click.Abort()

    if not rows:
        click.echo("[WARNING] No players to import")
        return

    store = _open_store(ctx)
    for row in rows:
        store.create_player(row["name"], row["nickname"], row["elo_rating"])

    click.echo(f"[SUCCESS] Imported {len(rows)} players")


@cli.command()
@click.option("--name", required=True, help="Tournament name")
@click.option(
    "--mode",
    type=click.Choice(["elimination", "round-robin", "swiss"]),
    default="round-robin",
    show_default=True,
)
@click.option("--players", "player_ids", required=True, help="Comma separated player IDs")
@click.option("--rounds", type=int, default=None, help="Round-robin cycles / swiss round cap")
@click.option("--points-per-win", type=int, default=None)
@click.option("--points-per-loss", type=int, default=None)
@click.option("--tiebreaker", type=click.Choice(["head-to-head", "win-rate"]), default=None)
@click.pass_context
def create_tournament(ctx, name, mode, player_ids, rounds, points_per_win, points_per_loss, tiebreaker):
    """Create a tournament and generate its matches.

    Example:
        ligapro create-tournament --name "Selective #1" --mode swiss --players 1,2,3,4
    """
    from ligapro.models import TournamentConfig, TournamentMode
    from ligapro.progression import DEFAULT_SWISS_ROUNDS
    from ligapro.tournament import create_tournament as create
    from ligapro.validation import ValidationError

    cfg = ctx.obj["config"]
    defaults = cfg["defaults"]

    try:
        ids = [int(p) for p in player_ids.split(",") if p.strip()]
    except ValueError:
        click.echo(f"[ERROR] --players must be comma separated integers, got '{player_ids}'", err=True)
        raise click.Abort()

    if rounds is None:
        rounds = DEFAULT_SWISS_ROUNDS if mode == TournamentMode.SWISS.value else defaults["rounds"]

    config = TournamentConfig.from_dict(
        {
            "rounds": rounds,
            "points_per_win": defaults["points_per_win"] if points_per_win is None else points_per_win,
            "points_per_loss": defaults["points_per_loss"] if points_per_loss is None else points_per_loss,
            "tiebreaker": tiebreaker or defaults["tiebreaker"],
        }
    )

    store = _open_store(ctx)
    try:
        tournament, matches = create(
            store, name, mode, ids, config, random_seed=cfg["random_seed"]
        )
    except ValidationError as e:
        click.echo(f"[ERROR] {e}", err=True)
        raise click.Abort()

    click.echo(f"[SUCCESS] Tournament #{tournament.id} '{tournament.name}' created with {len(matches)} matches")


@cli.command()
@click.option("--tournament", "tournament_id", type=int, required=True)
@click.pass_context
def show_matches(ctx, tournament_id: int):
    """List the matches of a tournament grouped by round."""
    from ligapro.tournament import tournament_progress

    store = _open_store(ctx)
    tournament = store.get_tournament(tournament_id)
    if tournament is None:
        click.echo(f"[ERROR] Tournament {tournament_id} not found", err=True)
        raise click.Abort()

    matches = store.get_matches_by_tournament(tournament_id)
    completed, total = tournament_progress(tournament, matches)
    click.echo(f"{tournament} - progress {completed}/{total}")

    current_round = None
    for match in matches:
        if match.round != current_round:
            current_round = match.round
            click.echo(f"\n  Round {current_round}")
        p1 = _player_label(store, match.player1_id)
        p2 = "BYE" if match.is_bye and match.player2_id is None else _player_label(store, match.player2_id)
        result = f"winner: {_player_label(store, match.winner_id)}" if match.is_completed else "pending"
        click.echo(f"    [{match.id}] {p1} vs {p2} - {result}")


@cli.command()
@click.option("--match", "match_id", type=int, required=True)
@click.option("--winner", "winner_id", type=int, required=True)
@click.pass_context
def report(ctx, match_id: int, winner_id: int):
    """Record the winner of a match."""
    from ligapro.tournament import report_result
    from ligapro.validation import ValidationError

    store = _open_store(ctx)
    try:
        report_result(store, match_id, winner_id)
    except ValidationError as e:
        click.echo(f"[ERROR] {e}", err=True)
        raise click.Abort()
    click.echo(f"[SUCCESS] Match {match_id}: winner {_player_label(store, winner_id)}")


@cli.command()
@click.option("--match", "match_id", type=int, required=True)
@click.pass_context
def undo(ctx, match_id: int):
    """Undo a match result and reverse its rating effect."""
    from ligapro.tournament import undo_result
    from ligapro.validation import ValidationError

    store = _open_store(ctx)
    try:
        undo_result(store, match_id)
    except ValidationError as e:
        click.echo(f"[ERROR] {e}", err=True)
        raise click.Abort()
    click.echo(f"[SUCCESS] Match {match_id} reset to pending")


@cli.command()
@click.option("--tournament", "tournament_id", type=int, required=True)
@click.option("--force", is_flag=True, help="Complete even with pending matches")
@click.pass_context
def complete(ctx, tournament_id: int, force: bool):
    """Mark a tournament as completed."""
    from ligapro.tournament import complete_tournament
    from ligapro.validation import ValidationError

    store = _open_store(ctx)
    try:
        complete_tournament(store, tournament_id, force=force)
    except ValidationError as e:
        click.echo(f"[ERROR] {e}", err=True)
        raise click.Abort()
    click.echo(f"[SUCCESS] Tournament {tournament_id} completed")


@cli.command()
@click.option("--tournament", "tournament_id", type=int, required=True)
@click.confirmation_option(prompt="Delete the tournament and reverse all its results?")
@click.pass_context
def delete_tournament(ctx, tournament_id: int):
    """Delete a tournament, reversing every decided match first."""
    from ligapro.tournament import delete_tournament as delete
    from ligapro.validation import ValidationError

    store = _open_store(ctx)
    try:
        reversed_count = delete(store, tournament_id)
    except ValidationError as e:
        click.echo(f"[ERROR] {e}", err=True)
        raise click.Abort()
    click.echo(f"[SUCCESS] Tournament {tournament_id} deleted ({reversed_count} results reversed)")


@cli.command()
@click.option("--mode", type=click.Choice(["points", "elo"]), default=None, help="Override the stored ranking mode")
@click.pass_context
def rankings(ctx, mode: str):
    """Show the league ranking."""
    from ligapro.models import RankingMode
    from ligapro.ranking import player_score, rankings_from_store

    store = _open_store(ctx)
    ranking_mode = RankingMode(mode) if mode else store.get_settings().ranking_mode
    entries = rankings_from_store(store, ranking_mode)

    click.echo(f"[STATS] Ranking ({ranking_mode.value})")
    for entry in entries:
        player = entry.player
        click.echo(
            f"  {entry.position}. {player.name} - {player_score(player, ranking_mode)} "
            f"({player.wins}W-{player.losses}L, SB {entry.sb_score})"
        )


@cli.command()
@click.option("--tournament", "tournament_id", type=int, required=True)
@click.pass_context
def standings(ctx, tournament_id: int):
    """Show the result table of one tournament."""
    from ligapro.ranking import compute_tournament_standings

    store = _open_store(ctx)
    tournament = store.get_tournament(tournament_id)
    if tournament is None:
        click.echo(f"[ERROR] Tournament {tournament_id} not found", err=True)
        raise click.Abort()

    table = compute_tournament_standings(tournament, store.get_matches_by_tournament(tournament_id))
    click.echo(f"[STATS] {tournament.name}")
    for standing in table:
        click.echo(
            f"  {standing.position}. {_player_label(store, standing.player_id)} - "
            f"{standing.points}pts ({standing.wins}W-{standing.losses}L)"
        )


@cli.command()
@click.pass_context
def stats(ctx):
    """Show league-wide stats."""
    from ligapro.ranking import get_global_stats

    store = _open_store(ctx)
    summary = get_global_stats(store.get_players())

    click.echo("[STATS] League")
    click.echo(f"  Players: {summary['total_players']}")
    click.echo(f"  Matches played: {summary['total_matches']}")
    if summary["best_streak_player"] is not None:
        click.echo(f"  Best streak: {summary['best_streak']} ({summary['best_streak_player'].name})")
    if summary["best_win_rate_player"] is not None:
        click.echo(f"  Best win rate: {summary['best_win_rate']}% ({summary['best_win_rate_player'].name})")


@cli.command()
@click.argument("mode", type=click.Choice(["points", "elo"]))
@click.pass_context
def set_mode(ctx, mode: str):
    """Switch the ranking mode shown by default."""
    store = _open_store(ctx)
    store.update_settings(mode)
    click.echo(f"[SUCCESS] Ranking mode set to {mode}")


@cli.command()
@click.option("--out", required=True, help="Output CSV file")
@click.option("--mode", type=click.Choice(["points", "elo"]), default=None)
@click.pass_context
def export_rankings(ctx, out: str, mode: str):
    """Export the ranking to CSV."""
    from ligapro.io_csv import export_rankings_csv
    from ligapro.models import RankingMode
    from ligapro.ranking import rankings_from_store

    store = _open_store(ctx)
    entries = rankings_from_store(store, RankingMode(mode) if mode else None)
    path = export_rankings_csv(entries, out)
    click.echo(f"[SUCCESS] Exported {len(entries)} players to {path}")


if __name__ == "__main__":
    cli()
