"""Message handling for the expense assistant.

The assistant is transport-agnostic: a chat integration hands it message
text or an uploaded file and sends back the Reply it returns. Every request
gets a reply, including failures.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from accountant.config import AppConfig
from accountant.dates import month_key
from accountant.domain.currency import CurrencyConverter, RateUnavailable
from accountant.domain.models import Month, Transaction
from accountant.domain.parser import FORMAT_HINT, ParseError, parse_expense
from accountant.domain.report import MonthlySummary, format_added_line, format_summary, summarize_month
from accountant.exchange import ExchangeRateClient
from accountant.store import LedgerError, LedgerStore, StoreCorrupt

logger = logging.getLogger(__name__)

LEDGER_FILENAME = "db.json"


@dataclass(frozen=True)
class Reply:
    """Response to send back: text, optionally with a file attached."""

    text: str
    document: bytes | None = None
    document_name: str | None = None


@dataclass(frozen=True)
class ExpenseResult:
    """Outcome of recording one expense message."""

    transaction: Transaction
    summary: MonthlySummary
    text: str


def corrupt_store_reply(error: StoreCorrupt) -> Reply:
    """Reply for an unreadable ledger, pointing at the upload that fixes it."""
    return Reply(f"{error}\nUpload a valid {LEDGER_FILENAME} to restore the ledger.")


class Assistant:
    """Handles chat commands, ledger uploads and expense messages."""

    def __init__(self, store: LedgerStore, converter: CurrencyConverter) -> None:
        self.store = store
        self.converter = converter
        self._commands: dict[str, Callable[[str], Reply]] = {
            "help": self.help_command,
            "start": self.help_command,
            "setcurrency": self.set_currency_command,
            "setinputcurrency": self.set_input_currency_command,
            "dump_db": self.dump_command,
        }

    def summarize(self, month: Month, converter: CurrencyConverter | None = None) -> MonthlySummary:
        """Summarize a month in the default output currency.

        Args:
            month: Month to summarize.
            converter: Converter to use instead of the assistant's own.

        Raises:
            StoreCorrupt: If the ledger cannot be read.
        """
        output_currency = self.store.get_default_currency()
        transactions = self.store.monthly_transactions(month)
        return summarize_month(month, transactions, output_currency, converter or self.converter)

    def record_expense(self, text: str, today: date) -> ExpenseResult:
        """Parse, store and summarize one expense message.

        Args:
            text: Message such as "1000 shop" or "50 EUR food".
            today: Day the expense is booked on.

        Returns:
            ExpenseResult with the stored transaction and reply text.

        Raises:
            ParseError: If the message is not an expense.
            LedgerError: If the store rejects the amount.
            StoreCorrupt: If the ledger cannot be read.
        """
        settings = self.store.get_settings()
        parsed = parse_expense(text, settings.default_input_currency)

        transaction = self.store.append(today, parsed.category, parsed.amount, parsed.currency)

        # One lookup per currency, shared by the confirmation line and the total
        converter = self.converter.pinned()
        output_currency = settings.default_output_currency
        try:
            converted: float | None = converter.convert(
                float(transaction.amount), transaction.currency, output_currency
            )
        except RateUnavailable as e:
            logger.warning("Could not convert new expense: %s", e)
            converted = None

        summary = self.summarize(month_key(today), converter)
        added_line = format_added_line(
            transaction.amount, transaction.currency, transaction.category, output_currency, converted
        )
        return ExpenseResult(transaction=transaction, summary=summary, text=format_summary(summary, added_line))

    def handle_text(self, text: str, today: date | None = None) -> Reply:
        """Handle an incoming text message.

        Args:
            text: Message text.
            today: Booking day for expenses. Defaults to the current date.

        Returns:
            Reply for the sender.
        """
        message = text.strip()
        logger.debug("Received message: %s", message)

        try:
            if message.startswith("/"):
                return self.dispatch_command(message)
            result = self.record_expense(message, today or date.today())
            return Reply(result.text)
        except ParseError:
            return Reply(FORMAT_HINT)
        except LedgerError as e:
            return Reply(str(e))
        except StoreCorrupt as e:
            logger.error("%s", e)
            return corrupt_store_reply(e)

    def dispatch_command(self, message: str) -> Reply:
        """Run a "/command args" message."""
        head, _, args = message.partition(" ")
        name = head[1:].split("@", 1)[0].lower()

        handler = self._commands.get(name)
        if handler is None:
            return Reply(f"Unknown command /{name}. Send /help to see available commands.")
        return handler(args.strip())

    def help_command(self, args: str) -> Reply:
        """List the commands with the current default currencies."""
        settings = self.store.get_settings()
        return Reply(
            "Available commands:\n"
            f'- Add expense: "<amount> <category>" (uses default input currency: {settings.default_input_currency})\n'
            '- Add expense with explicit currency: "<amount> <currency> <category>"\n'
            f"- /setcurrency <currency> - Set default output currency (now {settings.default_output_currency})\n"
            f"- /setinputcurrency <currency> - Set default input currency (now {settings.default_input_currency})\n"
            "- /dump_db - Download database\n"
            f"- Upload {LEDGER_FILENAME} - Replace database\n"
            "- /help - Show this help"
        )

    def set_currency_command(self, args: str) -> Reply:
        """Show or set the default output currency."""
        if not args:
            current = self.store.get_default_currency()
            return Reply(
                f"Current default output currency is {current}. To change it, use /setcurrency <currency-code>"
            )

        currency = self.store.set_default_currency(args)
        return Reply(f"Default output currency set to {currency}. Monthly totals will be reported in {currency}.")

    def set_input_currency_command(self, args: str) -> Reply:
        """Show or set the default input currency."""
        if not args:
            current = self.store.get_default_input_currency()
            return Reply(
                f"Current default input currency is {current}. To change it, use /setinputcurrency <currency-code>"
            )

        currency = self.store.set_default_input_currency(args)
        return Reply(
            f"Default input currency set to {currency}. "
            "All new expenses will use this currency unless specified otherwise."
        )

    def dump_command(self, args: str) -> Reply:
        """Attach the canonical ledger as db.json."""
        return Reply("Current database", document=self.store.dump_bytes(), document_name=LEDGER_FILENAME)

    def handle_upload(self, filename: str, data: bytes) -> Reply:
        """Replace the ledger with an uploaded file.

        Args:
            filename: Name of the uploaded file; must be db.json.
            data: Raw file contents.

        Returns:
            Reply for the sender.
        """
        if filename != LEDGER_FILENAME:
            return Reply(f"Invalid file name. Should be: {LEDGER_FILENAME}")

        try:
            ledger = self.store.restore_bytes(data)
        except StoreCorrupt as e:
            return Reply(f"Upload rejected, database unchanged. {e}")

        days = len(ledger.transactions_by_date)
        return Reply(f"DB updated ({days} day(s) of transactions)")


def create_assistant(config: AppConfig) -> Assistant:
    """Wire an Assistant from configuration."""
    client = ExchangeRateClient(
        base_url=config.rates_base_url,
        base_currency=config.rates_base_currency,
        timeout=config.rates_timeout,
    )
    converter = CurrencyConverter(client, base=config.rates_base_currency)
    return Assistant(LedgerStore(config.ledger_path), converter)
