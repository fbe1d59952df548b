# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

"""Command line interface for the LockGate session subsystem."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, TypeVar

import click

from lockgate.audit import AuditTrail
from lockgate.lock import UnlockOutcome
from lockgate.runtime import LockGateRuntime
from lockgate.security.policy import load_policy
from lockgate.security.validation import ValidationFailure
from lockgate.state import ErrorKind

T = TypeVar("T")

UNLOCK_MESSAGES = {
    UnlockOutcome.UNLOCKED: "Разблокировано.",
    UnlockOutcome.REJECTED: "Неверный PIN-код.",
    UnlockOutcome.LOCKED_OUT: "Слишком много попыток. Сессия завершена, войдите заново.",
    UnlockOutcome.LOGIN_REQUIRED: "Требуется вход.",
    UnlockOutcome.NOT_LOCKED: "Приложение не заблокировано.",
}


def _run(action: Callable[[LockGateRuntime], Awaitable[T]]) -> T:
    async def _main() -> T:
        runtime = LockGateRuntime.create()
        await runtime.start(monitor=False)
        try:
            return await action(runtime)
        finally:
            await runtime.close()

    return asyncio.run(_main())


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """Manage the persisted session and the device lock."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
def status() -> None:
    """Show the current session and lock state."""

    async def _status(runtime: LockGateRuntime) -> None:
        state = runtime.store.state
        if state.session.is_authenticated:
            click.echo(f"user: {state.session.name} <{state.session.email}>")
        else:
            click.echo("user: -")
        click.echo(f"locked: {'yes' if state.lock.locked else 'no'}")
        click.echo(f"failed unlock attempts: {state.lock.failed_unlock_attempts}")
        last_active = datetime.fromtimestamp(state.lock.last_active_at).isoformat(timespec="seconds")
        click.echo(f"last active: {last_active}")

    _run(_status)


@main.command()
@click.argument("email")
@click.password_option("--password", confirmation_prompt=False, prompt="Password")
def login(email: str, password: str) -> None:
    """Log in with EMAIL."""

    async def _login(runtime: LockGateRuntime) -> None:
        await runtime.auth.login(email, password)
        error = runtime.store.auth_request.error
        if error is not None:
            prefix = "SECURITY" if error.kind is ErrorKind.SECURITY else "ERROR"
            raise click.ClickException(f"[{prefix}] {error.message}")
        click.echo(f"Вы вошли как {runtime.store.session.name}.")

    _run(_login)


@main.command()
def logout() -> None:
    """End the session."""

    async def _logout(runtime: LockGateRuntime) -> None:
        runtime.auth.logout()
        click.echo("Сессия завершена.")

    _run(_logout)


@main.command()
def lock() -> None:
    """Lock the app now."""

    async def _lock(runtime: LockGateRuntime) -> None:
        if not runtime.lock.lock("manual"):
            raise click.ClickException("Нечего блокировать: нет активной сессии или она уже заблокирована.")
        click.echo("Заблокировано.")

    _run(_lock)


@main.command()
@click.option("--pin", prompt="PIN", hide_input=True)
def unlock(pin: str) -> None:
    """Unlock with the PIN."""

    async def _unlock(runtime: LockGateRuntime) -> None:
        outcome = await runtime.lock.unlock(pin)
        if outcome is not UnlockOutcome.UNLOCKED:
            raise click.ClickException(UNLOCK_MESSAGES[outcome])
        click.echo(UNLOCK_MESSAGES[outcome])

    _run(_unlock)


@main.command("set-pin")
@click.option("--pin", prompt="New PIN", hide_input=True, confirmation_prompt=True)
def set_pin(pin: str) -> None:
    """Set the PIN used to unlock the app."""

    async def _set_pin(runtime: LockGateRuntime) -> None:
        if not runtime.store.is_authenticated or runtime.store.is_locked:
            raise click.ClickException("Сначала войдите и разблокируйте приложение.")
        if runtime.verifier is None or not hasattr(runtime.verifier, "set_pin"):
            raise click.ClickException("PIN-код не поддерживается этой сборкой.")
        try:
            await runtime.verifier.set_pin(pin)
        except ValidationFailure as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo("PIN-код сохранён.")

    _run(_set_pin)


@main.command()
@click.confirmation_option(prompt="Удалить сохранённую сессию?")
def reset() -> None:
    """Delete the persisted session."""

    async def _reset(runtime: LockGateRuntime) -> None:
        runtime.gateway.detach()
        await runtime.gateway.flush()
        await runtime.gateway.purge()
        click.echo("Сохранённая сессия удалена.")

    _run(_reset)


@main.command("verify-audit")
def verify_audit() -> None:
    """Check the signatures and the hash chain of the audit trail."""

    trail = AuditTrail(load_policy().audit_dir)
    if not trail.verify_chain():
        raise click.ClickException("Журнал аудита повреждён или изменён.")
    click.echo("Журнал аудита в порядке.")


if __name__ == "__main__":
    main()
