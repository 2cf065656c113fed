"""
CLI main entry point.
"""

import argparse
import logging
import sys
from pathlib import Path

from ..client import DocumentApiClient, DocumentApiError
from ..config import Config, ConfigValidationError, create_default_config, load_config
from ..credentials import CredentialStore
from ..locking import LockManager
from ..uploads import MultipartUploader, StorageUploader

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="docapi",
        description="Lock documents and upload attachments to the document API",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("docapi.yaml"),
        help="Path to config file (default: docapi.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--tenant",
        type=str,
        default=None,
        help="Tenant to act as (default: auth.default_tenant from config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # login command
    login_parser = subparsers.add_parser("login", help="Check credentials against the API")
    login_parser.add_argument("--username", type=str, help="Username (default: from config)")
    login_parser.add_argument("--password", type=str, help="Password (default: from config)")

    # lock command
    lock_parser = subparsers.add_parser("lock", help="Acquire a lease lock on a document")
    lock_parser.add_argument("document_id", type=str, help="Document ID")
    lock_parser.add_argument(
        "--lease",
        type=int,
        default=None,
        help="Lease in seconds (default: lock.default_lease_seconds)",
    )

    # renew command
    renew_parser = subparsers.add_parser("renew", help="Renew a lease lock")
    renew_parser.add_argument("document_id", type=str, help="Document ID")
    renew_parser.add_argument("lock_id", type=str, help="Lock ID from the last lock/renew")
    renew_parser.add_argument("--lease", type=int, default=None, help="Lease in seconds")

    # unlock command
    unlock_parser = subparsers.add_parser("unlock", help="Release a lease lock")
    unlock_parser.add_argument("document_id", type=str, help="Document ID")
    unlock_parser.add_argument("lock_id", type=str, help="Lock ID")

    # upload command
    upload_parser = subparsers.add_parser(
        "upload", help="Upload a file as an attachment using multipart upload"
    )
    upload_parser.add_argument("document_id", type=str, help="Document ID")
    upload_parser.add_argument("file", type=Path, help="File to upload")
    lock_group = upload_parser.add_mutually_exclusive_group()
    lock_group.add_argument("--lock-id", type=str, help="Lock ID already held on the document")
    lock_group.add_argument(
        "--auto-lock",
        action="store_true",
        help="Lock the document for the upload and release it afterwards",
    )
    upload_parser.add_argument("--content-type", type=str, help="MIME type (default: guessed)")
    upload_parser.add_argument(
        "--part-size",
        type=int,
        default=None,
        help="Requested part size in bytes (the server may choose another)",
    )

    # upload-status command
    status_parser = subparsers.add_parser(
        "upload-status", help="Show the server's view of a multipart upload session"
    )
    status_parser.add_argument("document_id", type=str, help="Document ID")
    status_parser.add_argument("session_id", type=str, help="Upload session ID")

    # init-config command
    subparsers.add_parser("init-config", help="Write a default config file")

    return parser


def build_client(config: Config, tenant: str | None = None) -> DocumentApiClient:
    """Create a client whose credential store is seeded from config."""
    tenant = tenant or config.auth.default_tenant
    credentials = CredentialStore(default_tenant=tenant)
    if config.auth.token:
        credentials.set_token(tenant or "", config.auth.token)
        if tenant:
            credentials.set_active_tenant(tenant)

    return DocumentApiClient(
        base_url=config.api.base_url,
        credentials=credentials,
        timeout=config.api.timeout_seconds,
        max_retries=config.api.max_retries,
        backoff_factor=config.api.backoff_factor,
    )


def authenticate(client: DocumentApiClient, config: Config, tenant: str | None = None) -> None:
    """Log in with configured credentials unless a token is already available."""
    if client.credentials.token_for(tenant):
        return
    if config.auth.username and config.auth.password:
        client.login(config.auth.username, config.auth.password, tenant=tenant)


def cmd_login(config: Config, tenant: str | None, username: str | None, password: str | None) -> int:
    """Log in and report the authenticated user."""
    username = username or config.auth.username
    password = password or config.auth.password
    if not username or not password:
        print("❌ Username and password are required (flags or config)")
        return 1

    client = build_client(config, tenant)
    result = client.login(username, password, tenant=tenant or config.auth.default_tenant)
    print(f"✓ Logged in as {result.username or username}")
    print(f"  Tenant:        {result.tenant or '-'}")
    print(f"  User ID:       {result.user_id or '-'}")
    print(f"  Privilege set: {result.privilege_set_name or '-'}")
    return 0


def cmd_lock(config: Config, tenant: str | None, document_id: str, lease: int | None) -> int:
    """Acquire a lock and print its id."""
    client = build_client(config, tenant)
    authenticate(client, config, tenant)
    manager = LockManager(client, config.lock.default_lease_seconds)

    lock = manager.lock(document_id, lease, tenant=tenant)
    print(f"🔒 Locked document {document_id}")
    print(f"  Lock ID:    {lock.lock_id}")
    print(f"  Locked by:  {lock.locked_by or '-'}")
    print(f"  Expires at: {lock.expires_at or '-'}")
    return 0


def cmd_renew(
    config: Config, tenant: str | None, document_id: str, lock_id: str, lease: int | None
) -> int:
    """Renew a lock."""
    client = build_client(config, tenant)
    authenticate(client, config, tenant)
    manager = LockManager(client, config.lock.default_lease_seconds)

    lock = manager.renew(document_id, lock_id, lease, tenant=tenant)
    print(f"🔒 Renewed lock {lock.lock_id} on document {document_id}")
    print(f"  Expires at: {lock.expires_at or '-'}")
    return 0


def cmd_unlock(config: Config, tenant: str | None, document_id: str, lock_id: str) -> int:
    """Release a lock."""
    client = build_client(config, tenant)
    authenticate(client, config, tenant)
    manager = LockManager(client, config.lock.default_lease_seconds)

    manager.unlock(document_id, lock_id, tenant=tenant)
    print(f"🔓 Unlocked document {document_id}")
    return 0


def cmd_upload(
    config: Config,
    tenant: str | None,
    document_id: str,
    file: Path,
    lock_id: str | None = None,
    auto_lock: bool = False,
    content_type: str | None = None,
    part_size: int | None = None,
) -> int:
    """Upload a file through a multipart session."""
    client = build_client(config, tenant)
    authenticate(client, config, tenant)
    manager = LockManager(client, config.lock.default_lease_seconds)

    def report(part_number: int, total_parts: int, bytes_sent: int) -> None:
        print(f"  Part {part_number}/{total_parts} uploaded ({bytes_sent} bytes)")

    print(f"📤 Uploading {file} to document {document_id}...")
    with StorageUploader(config.upload.storage_timeout_seconds) as storage:
        uploader = MultipartUploader(client, storage, config.upload.default_part_size_bytes)

        acquired = None
        if auto_lock:
            acquired = manager.lock(document_id, tenant=tenant)
            lock_id = acquired.lock_id
        try:
            result = uploader.upload(
                document_id,
                file,
                lock_id=lock_id,
                content_type=content_type,
                part_size_bytes=part_size,
                progress=report,
                tenant=tenant,
            )
        finally:
            if acquired is not None:
                manager.release(document_id, acquired.lock_id, tenant=tenant)

    print(f"✓ Upload complete: attachment {result.attachment_id}")
    print(f"  Session:  {result.session_id}")
    print(f"  Parts:    {result.parts_uploaded}")
    print(f"  Location: {result.bucket or '-'}/{result.storage_key or '-'}")
    return 0


def cmd_upload_status(config: Config, tenant: str | None, document_id: str, session_id: str) -> int:
    """Show a multipart session."""
    client = build_client(config, tenant)
    authenticate(client, config, tenant)

    session = client.get_multipart_upload_status(document_id, session_id, tenant=tenant)
    print(f"\n📊 Upload session {session.session_id}")
    print("=" * 40)
    print(f"  Status:     {session.status or '-'}")
    print(f"  File:       {session.file_name or '-'} ({session.total_size or 0} bytes)")
    print(f"  Part size:  {session.part_size_bytes or '-'}")
    print(f"  Attachment: {session.attachment_id or '-'}")
    print()
    return 0


def cmd_init_config(config_path: Path) -> int:
    """Write a default config file."""
    if config_path.exists():
        print(f"❌ {config_path} already exists")
        return 1
    create_default_config(config_path)
    print(f"✓ Wrote {config_path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.config)

    # Load config
    try:
        config = load_config(parsed.config)
    except (ConfigValidationError, OSError, ValueError) as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"❌ {error}")
        return 1

    tenant = parsed.tenant

    # Route to command
    try:
        if parsed.command == "login":
            return cmd_login(config, tenant, parsed.username, parsed.password)
        elif parsed.command == "lock":
            return cmd_lock(config, tenant, parsed.document_id, parsed.lease)
        elif parsed.command == "renew":
            return cmd_renew(config, tenant, parsed.document_id, parsed.lock_id, parsed.lease)
        elif parsed.command == "unlock":
            return cmd_unlock(config, tenant, parsed.document_id, parsed.lock_id)
        elif parsed.command == "upload":
            return cmd_upload(
                config,
                tenant,
                parsed.document_id,
                parsed.file,
                lock_id=parsed.lock_id,
                auto_lock=parsed.auto_lock,
                content_type=parsed.content_type,
                part_size=parsed.part_size,
            )
        elif parsed.command == "upload-status":
            return cmd_upload_status(config, tenant, parsed.document_id, parsed.session_id)
        else:
            parser.print_help()
            return 1
    except DocumentApiError as e:
        logger.debug("Command %s failed", parsed.command, exc_info=True)
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
