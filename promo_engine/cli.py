"""
promo_engine/cli.py
-------------------
Promo tester: evaluate a sample cart against a promotions file from the
command line.

    promo-engine evaluate cart.json promotions.json [--at 2025-01-01T12:00:00Z] [--json]
    promo-engine list promotions.json [--at ...]

cart.json        → [{"sku": "TEE-01", "price": 100, "quantity": 3}, ...]
promotions.json  → [{"id": "p1", "name": "2x1 Tees", "promo_type": "nxm",
                     "config": {"buy": 2, "pay": 1}, "eligible_skus": ["TEE-"]}, ...]
Either file may also wrap its list under "items" / "promotions".
"""
import json
from decimal import Decimal

import click

from config import get_config
from promo_engine.cart import cart_summary
from promo_engine.promotions.engine import evaluate_promotions
from promo_engine.promotions.formatting import describe
from promo_engine.promotions.guards import schedule_state, utc_now
from promo_engine.promotions.loader import cart_from_rows, parse_timestamp, promotions_from_rows
from promo_engine.utils.logging import setup_logging


# ── Helpers ───────────────────────────────────────────────────────

def _read_rows(path: str, wrapper_key: str) -> list:
    """Load a JSON list of objects (optionally wrapped under `wrapper_key`)."""
    try:
        with open(path, encoding='utf-8') as fh:
            data = json.load(fh, parse_float=Decimal)
    except (OSError, ValueError) as e:
        raise click.ClickException(f'Could not read {path}: {e}')

    if isinstance(data, dict):
        data = data.get(wrapper_key)
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise click.ClickException(f'{path}: expected a list of objects')
    return data


def _clock_for(at):
    if not at:
        return utc_now
    moment = parse_timestamp(at)
    if moment is None:
        raise click.BadParameter(f'not an ISO-8601 timestamp: {at!r}', param_hint='--at')
    return lambda: moment


# ── Commands ──────────────────────────────────────────────────────

@click.group()
@click.option('--env', default=None,
              help='Configuration name (development, production, testing).')
@click.pass_context
def cli(ctx, env):
    """Evaluate promotion rules against sample carts."""
    cfg = get_config(env)
    setup_logging(cfg)
    ctx.obj = cfg


@cli.command('evaluate')
@click.argument('cart_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('promotions_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--at', default=None, help='Evaluate as of this ISO-8601 time (default: now).')
@click.option('--json', 'as_json', is_flag=True, help='Print the summary as JSON.')
@click.pass_obj
def evaluate(cfg, cart_file, promotions_file, at, as_json):
    """Show which promotions apply to CART_FILE and the resulting total."""
    clock      = _clock_for(at)
    lines      = cart_from_rows(_read_rows(cart_file, 'items'))
    promotions = promotions_from_rows(_read_rows(promotions_file, 'promotions'),
                                      cfg.DEFAULT_MATCH_MODE)

    result  = evaluate_promotions(lines, promotions, clock=clock, currency=cfg.CURRENCY_SYMBOL)
    summary = cart_summary(lines, result, cfg.DISPLAY_QUANTUM)

    if as_json:
        click.echo(json.dumps(summary, default=str, indent=2))
        return

    cur = cfg.CURRENCY_SYMBOL
    click.echo(f'{"SKU":<20} {"Price":>10} {"Qty":>5} {"Line total":>12}')
    click.echo('─' * 50)
    for row in summary['lines']:
        click.echo(f'{row["sku"]:<20} {row["unit_price"]:>10} {row["quantity"]:>5} {row["line_total"]:>12}')

    click.echo('')
    if summary['applied']:
        click.echo('Applied promotions:')
        for entry in summary['applied']:
            click.echo(f'  {entry["name"]} ({entry["description"]}) '
                       f'on {entry["items"]} item(s): -{cur}{entry["discount"]}')
    else:
        click.echo('No promotions apply.')

    click.echo('─' * 50)
    click.echo(f'{"Subtotal:":<12}{cur}{summary["subtotal"]}')
    click.echo(f'{"Discount:":<12}-{cur}{summary["total_discount"]}')
    click.echo(f'{"Total:":<12}{cur}{summary["discounted_total"]}')


@cli.command('list')
@click.argument('promotions_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--at', default=None, help='Check time windows as of this ISO-8601 time.')
@click.pass_obj
def list_promotions(cfg, promotions_file, at):
    """List promotions in evaluation order with their current status."""
    now        = _clock_for(at)()
    promotions = promotions_from_rows(_read_rows(promotions_file, 'promotions'),
                                      cfg.DEFAULT_MATCH_MODE)
    if not promotions:
        click.echo('No promotions found.')
        return

    click.echo(f'{"Prio":>5}  {"Name":<24} {"Type":<18} {"Status":<18} Description')
    click.echo('─' * 90)
    for promo in sorted(promotions, key=lambda p: p.priority, reverse=True):
        if promo.typed_config is None:
            status = 'invalid_config'
        else:
            status = schedule_state(promo, now) or 'live'
        label = describe(promo.promo_type, promo.config, cfg.CURRENCY_SYMBOL)
        click.echo(f'{promo.priority:>5}  {promo.name[:24]:<24} {promo.type_label[:18]:<18} {status:<18} {label}')
