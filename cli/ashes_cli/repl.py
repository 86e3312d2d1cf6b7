"""REPL for the ashes registry."""

from __future__ import annotations

import asyncio
import getpass
import shlex
from collections.abc import Callable
from pathlib import Path

from ashes.errors import NotFound, RegistryError, ValidationFailure
from ashes.services.auth import authenticate
from ashes.services.collection import KINDS
from ashes.services.query import LocationFilter, RecordFilter
from ashes.services.reconciler import Reconciler
from ashes_cli.session import SessionState

HEADERS = {
    "id": "ID",
    "storage_number": "Storage Number",
    "location": "Location",
    "deceased_name": "Deceased Name",
    "burial_register_number": "Burial Register Number",
    "renter_name": "Renter Name",
    "storage_start_date": "Storage Start Date",
    "retrieval_date": "Retrieval Date",
    "cremation_date": "Cremation Date",
    "name": "Name",
    "description": "Description",
    "created_at": "Created",
}

# Columns shown in /list; /show prints every field
LIST_COLUMNS = {
    "records": ("id", "storage_number", "location", "deceased_name", "renter_name", "storage_start_date"),
    "locations": ("id", "name", "description"),
}


class Repl:
    """Interactive REPL for the registry."""

    def __init__(
        self,
        reconciler: Reconciler,
        session: SessionState | None = None,
        input_fn: Callable[[str], str] = input,
        password_fn: Callable[[str], str] = getpass.getpass,
    ):
        self.reconciler = reconciler
        self.session = session or SessionState()
        self.input_fn = input_fn
        self.password_fn = password_fn
        self.running = True

    async def _ask(self, prompt: str, secret: bool = False) -> str:
        fn = self.password_fn if secret else self.input_fn
        return await asyncio.to_thread(fn, prompt)

    async def start(self, username: str | None = None):
        """Start the REPL."""
        try:
            if not self.session.authenticated and not await self._login_prompt(username):
                return

            await self._refresh()

            while self.running:
                try:
                    line = (await self._ask(f"{self.session.tab} > ")).strip()
                except (EOFError, KeyboardInterrupt):
                    print()
                    break

                if not line:
                    continue
                await self.handle(line)

                if not self.session.authenticated and self.running:
                    if not await self._login_prompt():
                        break
                    await self._refresh()
        finally:
            await self.reconciler.gateway.close()

    async def handle(self, line: str):
        """Run one line of input. Errors become a one-line message."""
        try:
            if line.startswith("/"):
                await self._handle_command(line)
            else:
                print("  Commands start with /. Type /help for available commands.")
        except RegistryError as e:
            print(f"  Error: {e.message}")
        finally:
            self.session.close_modal()

    async def _handle_command(self, line: str):
        """Handle REPL commands."""
        parts = line.split(maxsplit=1)
        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd == "/quit":
            self.running = False
            print("Goodbye.")
        elif cmd == "/tab":
            self._switch_tab(arg)
        elif cmd == "/list":
            self._show_view()
        elif cmd == "/page":
            self._go_to_page(arg)
        elif cmd == "/search":
            self._search(arg)
        elif cmd == "/reset":
            self._collection().reset_filter()
            self._show_view()
        elif cmd == "/sort":
            self._sort(arg)
        elif cmd == "/new":
            await self._create(arg)
        elif cmd == "/edit":
            await self._edit(arg)
        elif cmd == "/show":
            self._show_details(arg)
        elif cmd == "/delete":
            await self._delete(arg)
        elif cmd == "/import":
            await self._import(arg)
        elif cmd == "/export":
            self._export(arg)
        elif cmd == "/refresh":
            await self._refresh()
        elif cmd == "/status":
            self._show_status()
        elif cmd == "/logout":
            self.session.logout()
            print("  Logged out.")
        elif cmd == "/help":
            self._show_help()
        else:
            print(f"Unknown command: {cmd}")
            print("Type /help for available commands.")

    # -- login ----------------------------------------------------------------

    async def _login_prompt(self, username: str | None = None) -> bool:
        """Ask for credentials until they are accepted. False on EOF/interrupt."""
        while True:
            try:
                name = username or (await self._ask("Login name: ")).strip()
                password = await self._ask("Password: ", secret=True)
            except (EOFError, KeyboardInterrupt):
                print()
                return False
            username = None

            if await self.login(name, password):
                return True

    async def login(self, name: str, password: str) -> bool:
        result = await authenticate(self.reconciler.gateway, name, password)
        if result.ok:
            self.session.login(name)
            print(f"  Logged in as {name}")
            return True
        print(f"  {result.error}")
        return False

    # -- listing --------------------------------------------------------------

    def _collection(self):
        return self.reconciler.collection(self.session.tab)

    def _switch_tab(self, arg: str):
        if arg not in KINDS:
            print("Usage: /tab records|locations")
            return
        self.session.switch_tab(arg)
        self._show_view()

    def _show_banner(self):
        if not self.reconciler.connected:
            print("  Demo data: gateway not connected. Changes stay in this session.")

    def _show_view(self):
        coll = self._collection()
        view = coll.view()
        columns = LIST_COLUMNS[self.session.tab]

        self._show_banner()
        if not view.rows:
            print(f"  No {self.session.tab} found.")
        else:
            print("  " + " | ".join(HEADERS[c] for c in columns))
            for row in view.rows:
                print("  " + " | ".join(_cell(getattr(row, c)) for c in columns))
        sort = f", sorted by {coll.sort.key} {coll.sort.direction}" if coll.sort else ""
        print(f"  Page {view.page} of {view.total_pages} ({view.total_count} {self.session.tab}{sort})")

    def _go_to_page(self, arg: str):
        coll = self._collection()
        moves = {
            "next": coll.next_page,
            "prev": coll.previous_page,
            "first": coll.first_page,
            "last": coll.last_page,
        }
        if arg in moves:
            moves[arg]()
        else:
            try:
                coll.go_to_page(int(arg))
            except ValueError:
                print("Usage: /page <n>|next|prev|first|last")
                return
        self._show_view()

    def _search(self, arg: str):
        coll = self._collection()
        if self.session.tab == "locations":
            coll.apply_filter(LocationFilter(name=arg))
        else:
            fields = _parse_assignments(arg, allowed=("text", "location", "date"), bare="text")
            coll.apply_filter(RecordFilter(**fields))
        self._show_view()

    def _sort(self, arg: str):
        coll = self._collection()
        if arg not in coll.kind.columns:
            print(f"Usage: /sort {'|'.join(coll.kind.columns)}")
            return
        coll.sort_by(arg)
        self._show_view()

    def _show_details(self, entity_id: str):
        entity = self._require_entity(entity_id)
        self.session.open_modal("details", entity_id)
        for name, value in entity.model_dump().items():
            print(f"  {HEADERS.get(name, name)}: {_cell(value)}")

    def _show_status(self):
        state = "connected" if self.reconciler.connected else "not connected (demo data)"
        print(f"  User: {self.session.username}")
        print(f"  Gateway: {state}")
        print(f"  Records: {len(self.reconciler.records)}")
        print(f"  Locations: {len(self.reconciler.locations)}")

    # -- mutations ------------------------------------------------------------

    async def _refresh(self):
        records, locations = await self.reconciler.refresh_all()
        print(f"  Loaded {len(records.value)} records and {len(locations.value)} locations.")
        self._show_banner()

    async def _create(self, arg: str):
        kind = self._collection().kind
        self.session.open_modal("create")
        form = await self._fill_form(kind.form(), arg)
        outcome = await self.reconciler.create(kind.name, form)
        suffix = "" if outcome.is_remote else " (saved locally)"
        print(f"  Created {outcome.value.id}{suffix}")

    async def _edit(self, arg: str):
        entity_id, _, rest = arg.partition(" ")
        entity = self._require_entity(entity_id)
        kind = self._collection().kind
        self.session.open_modal("edit", entity_id)
        form = await self._fill_form(kind.form.from_entity(entity), rest)
        outcome = await self.reconciler.update(kind.name, entity_id, form)
        suffix = "" if outcome.is_remote else " (saved locally)"
        print(f"  Updated {entity_id}{suffix}")

    async def _delete(self, arg: str):
        entity_id = arg.split()[0] if arg else ""
        self._require_entity(entity_id)
        if "-y" not in arg.split()[1:]:
            answer = (await self._ask(f"  Delete {entity_id}? This cannot be undone. [y/N] ")).strip().lower()
            if answer not in ("y", "yes"):
                print("  Cancelled.")
                return
        await self.reconciler.delete(self.session.tab, entity_id)
        print(f"  Deleted {entity_id}")

    async def _fill_form(self, form, arg: str):
        """
        Apply field=value pairs from the command line, or prompt for every
        field when none are given. Enter keeps the current value.
        """
        names = list(type(form).model_fields)
        if arg:
            values = _parse_assignments(arg, allowed=names)
        else:
            values = {}
            for name in names:
                current = getattr(form, name)
                hint = f" [{current}]" if current else ""
                answer = (await self._ask(f"  {HEADERS.get(name, name)}{hint}: ")).strip()
                values[name] = answer or current
        return form.model_copy(update=values)

    async def _import(self, arg: str):
        if not arg:
            print("Usage: /import <file.csv>")
            return
        try:
            text = Path(arg).expanduser().read_text(encoding="utf-8")
        except OSError as e:
            print(f"  Error: Could not read {arg}: {e.strerror}")
            return
        records = await self.reconciler.import_csv(text)
        print(f"  Imported {len(records)} records.")

    def _export(self, arg: str):
        if self.session.tab != "records":
            print("  Export is only available on the records tab. Use /tab records first.")
            return
        filename, text = self.reconciler.export_csv()
        path = Path(arg).expanduser() if arg else Path(filename)
        path.write_text(text, encoding="utf-8")
        print(f"  Exported {len(self.reconciler.records.filtered())} records to {path}")

    def _require_entity(self, entity_id: str):
        if not entity_id:
            raise ValidationFailure("An id is required.")
        entity = self._collection().get(entity_id)
        if entity is None:
            raise NotFound(f"No {self.session.tab} entry with id {entity_id}.")
        return entity

    def _show_help(self):
        """Show help message."""
        print("""
  REPL Commands:
    /tab records|locations   - Switch between records and locations
    /list                    - Show the current page
    /page <n>|next|prev|first|last
    /search text=.. location=.. date=..
                             - Filter records (locations: /search <name>)
    /reset                   - Clear the filter
    /sort <field>            - Sort by field; again to reverse
    /new [field=value ...]   - Create an entry (prompts if no fields given)
    /edit <id> [field=value ...]
    /show <id>               - Show every field of an entry
    /delete <id> [-y]        - Delete an entry
    /import <file.csv>       - Import records from CSV
    /export [file.csv]       - Export the filtered records to CSV
    /refresh                 - Reload from the gateway
    /status                  - Show connection and counts
    /logout                  - Log out
    /help                    - Show this help
    /quit                    - Exit REPL
""")


def _cell(value) -> str:
    return "" if value is None else str(value)


def _parse_assignments(arg: str, allowed, bare: str | None = None) -> dict[str, str]:
    """
    Parse `key=value` tokens (shell quoting allowed). Tokens without `=` are
    joined into the `bare` field when one is given.
    """
    try:
        tokens = shlex.split(arg)
    except ValueError as e:
        raise ValidationFailure(f"Could not read arguments: {e}") from e

    values: dict[str, str] = {}
    loose = []
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep and key in allowed:
            values[key] = value
        elif not sep and bare:
            loose.append(token)
        else:
            raise ValidationFailure(f"Unknown field: {key}. Expected one of: {', '.join(allowed)}")
    if loose:
        values[bare] = " ".join(loose)
    return values
