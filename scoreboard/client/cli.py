import time

import click

from scoreboard.config import ClientConfig
from scoreboard.models import TEAMS
from scoreboard.services.game import scoring
from scoreboard.client.cache import LocalCache
from scoreboard.client.endpoint import endpoint_from_query
from scoreboard.client.sync import SyncClient


def render(state) -> str:
    names, scores = state.team_names, state.scores
    line = f"{names['teamA'] or 'Team A'} {scores['teamA']:02d} - {scores['teamB']:02d} {names['teamB'] or 'Team B'}"
    if not state.started:
        line += '  (not started)'
    if state.winner:
        line += f'  winner: {state.winner}'
    return line


@click.group()
@click.option('--server', envvar='SCOREBOARD_SERVER', default=ClientConfig.SERVER_URL, show_default=True,
              help='Relay URL, or a page URL carrying ?server=<host>.')
@click.option('--cache', 'cache_path', envvar='SCOREBOARD_CACHE', default=ClientConfig.CACHE_PATH,
              help='Local cache file.')
@click.pass_context
def cli(ctx, server, cache_path):
    """Drive or watch a live scoreboard from the terminal."""
    endpoint = endpoint_from_query(server, server)
    if '://' not in endpoint:
        endpoint = f'http://{endpoint}'
    client = SyncClient.from_config(endpoint=endpoint, cache=LocalCache(cache_path))
    ctx.obj = client
    ctx.call_on_close(client.stop)


def _apply(client: SyncClient, mutator):
    client.load_initial()
    try:
        state = client.apply_local_change(mutator)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    if not client.drain_queue():
        click.echo('Relay unreachable; change kept in the local cache only.', err=True)
    click.echo(render(state))
    return state


@cli.command()
@click.pass_obj
def show(client):
    """Print the current score."""
    click.echo(render(client.load_initial()))


@cli.command()
@click.argument('team_a')
@click.argument('team_b')
@click.pass_obj
def names(client, team_a, team_b):
    """Set both team names."""
    _apply(client, lambda s: scoring.set_team_names(s, team_a, team_b))


@cli.command()
@click.pass_obj
def start(client):
    """Start the match (both team names must be set)."""
    _apply(client, scoring.start_game)


@cli.command(context_settings={'ignore_unknown_options': True})
@click.argument('team', type=click.Choice(TEAMS))
@click.argument('points', type=int)
@click.pass_obj
def score(client, team, points):
    """Add POINTS (may be negative) to TEAM."""
    _apply(client, lambda s: scoring.update_score(s, team, points))


@cli.command()
@click.pass_obj
def reset(client):
    """Zero both scores."""
    _apply(client, scoring.reset_scores)


@cli.command()
@click.pass_obj
def win(client):
    """Declare the winner from the current scores."""
    _apply(client, scoring.determine_winner)


@cli.command('next-game')
@click.pass_obj
def next_game(client):
    """Reset everything for a new match."""
    _apply(client, scoring.next_game)
    client.cache.clear()


@cli.command()
@click.pass_obj
def watch(client):
    """Print every update until interrupted."""
    client.subscribe(lambda state: click.echo(render(state)))
    client.subscribe_status(lambda status: click.echo(f'[{status.value}]', err=True))
    client.start()
    click.echo(render(client.state))
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass


if __name__ == '__main__':
    cli()
