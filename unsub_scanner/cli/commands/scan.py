"""
Scan command for the unsubscribe scanner.

Connects to a mailbox, collects unsubscribe links and writes the listing.
"""

import click
from unsub_scanner.config import Config, KNOWN_IMAP_HOSTS, ScanOptions, imap_host_for_email
from unsub_scanner.email_processor.scanner import UnsubscribeScanner
from unsub_scanner.email_processor.unsubscribe.exceptions import ConnectError, ScanError
from unsub_scanner.email_processor.unsubscribe.logging import configure_logging
from ..utils import PAD, banner_lines, echo_progress, pluralize

AUTH_FAILED_MESSAGE = 'Invalid credentials. Check your email and password.'
CONNECT_FAILED_MESSAGE = 'Connection failed. Check host and port.'


def describe_error(error: Exception) -> str:
    """Single human-readable line for a failed run."""
    if isinstance(error, ConnectError):
        return AUTH_FAILED_MESSAGE if error.auth_failed else CONNECT_FAILED_MESSAGE
    if isinstance(error, ScanError):
        return error.message
    return str(error) or type(error).__name__


@click.command('scan')
@click.option('--email', 'email', prompt='Email', envvar='IMAP_USERNAME',
              help='Email address used to log in')
@click.option('--host', envvar='IMAP_HOST',
              help='IMAP host (guessed from the email domain when omitted)')
@click.option('--password', envvar='UNSUB_SCANNER_PASSWORD',
              help='Account password (prompted when omitted)')
@click.option('--port', type=int, default=Config.IMAP_PORT, envvar='IMAP_PORT', show_default=True,
              help='IMAP port')
@click.option('--mailbox', default=Config.DEFAULT_MAILBOX, envvar='DEFAULT_MAILBOX', show_default=True,
              help='Mailbox to scan, e.g. "[Gmail]/Promotions"')
@click.option('--output', 'output_file', default=Config.OUTPUT_FILE, envvar='OUTPUT_FILE',
              show_default=True, help='File the listing is written to')
@click.option('--months', type=click.IntRange(min=0), default=Config.SCAN_MONTHS, envvar='SCAN_MONTHS',
              show_default=True, help='Only scan messages from the last N months')
@click.option('--batch-size', type=click.IntRange(min=1), default=Config.BATCH_SIZE, envvar='BATCH_SIZE',
              show_default=True, help='Messages processed concurrently per batch')
@click.option('--timeout', type=int, default=Config.IMAP_TIMEOUT, envvar='IMAP_TIMEOUT',
              show_default=True, help='IMAP connection timeout in seconds')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default=Config.LOG_LEVEL, envvar='LOG_LEVEL', show_default=True,
              help='Level for structured log output on stderr')
def scan(email, host, password, port, mailbox, output_file, months, batch_size, timeout, log_level):
    """
    Scan a mailbox and save one unsubscribe link per sender.

    Reads messages from the last N months, takes each sender's most recent
    List-Unsubscribe entry (or unsubscribe link in the HTML body), and
    writes them newest first to the output file.

    Example:
        python main.py scan --email user@gmail.com
        python main.py scan --email user@example.com --host mail.example.com --months 6
    """
    configure_logging(level=log_level)

    click.echo('', err=True)
    for line in banner_lines(months):
        click.secho(PAD + line, fg='cyan', bold=True, err=True)
    click.echo('', err=True)

    email = email.strip()
    if not host:
        host = imap_host_for_email(email)
        if host:
            click.secho(f"{PAD}IMAP host    : {host} (from email)", dim=True, err=True)
        else:
            host = click.prompt(f"{PAD}IMAP host").strip()

    if not password:
        password = click.prompt(f"{PAD}Password", hide_input=True)

    try:
        options = ScanOptions(
            host=host,
            username=email,
            password=password,
            port=port,
            mailbox=mailbox,
            output_file=output_file,
            months=months,
            batch_size=batch_size,
            timeout=timeout
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    scanner = UnsubscribeScanner(options, progress_callback=echo_progress)

    click.echo(f"{PAD}🔌 Connecting to {host}…", err=True)
    click.echo(f"{PAD}📬 Scanning {mailbox} (last {pluralize(months, 'month')})…", err=True)
    click.secho(f"{PAD}📄 Output: {options.output_path}", dim=True, err=True)
    click.echo('', err=True)

    try:
        summary = scanner.run()
    except Exception as e:
        click.echo('', err=True)
        click.secho(f"{PAD}⚠️  {describe_error(e)}", fg='yellow', err=True)
        raise click.Abort()

    if summary.message_count:
        click.echo('', err=True)
    click.echo('', err=True)
    click.echo(PAD + '-' * 40, err=True)
    click.secho(f"{PAD}✅ Done.", fg='green', nl=False, err=True)
    click.echo(f" {pluralize(summary.link_count, 'unsubscribe link')} saved to:", err=True)
    click.echo(f"{PAD}{summary.output_path}", err=True)
    click.echo(f"{PAD}(from {pluralize(summary.message_count, 'message')} scanned)", err=True)


@click.command('hosts')
def hosts():
    """
    List email domains with a known IMAP host.

    Other domains are tried as imap.<domain>.
    """
    width = max(len(domain) for domain in KNOWN_IMAP_HOSTS)
    for domain, server in sorted(KNOWN_IMAP_HOSTS.items()):
        click.echo(f"{PAD}{domain.ljust(width)}  {server}")
