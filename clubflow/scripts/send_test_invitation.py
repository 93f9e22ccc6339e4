"""
Send a test invitation email through the configured SMTP server.
Run with: python -m clubflow.scripts.send_test_invitation someone@example.com
"""

import argparse
import logging
import secrets
import sys
from datetime import timedelta

from clubflow.config import settings
from clubflow.core.email import build_invitation_url, render_invitation_email, send_email
from clubflow.core.timeutils import utcnow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Send a test invitation email")
    parser.add_argument("email", help="Recipient address")
    parser.add_argument("--club", default="Testverein", help="Club name shown in the email")
    parser.add_argument("--inviter", default="ClubFlow Team", help="Inviter name shown in the email")
    parser.add_argument("--role", default="member", help="Role name (member, trainer, club-administrator, obmann)")
    parser.add_argument("--message", default=None, help="Optional personal message")
    parser.add_argument("--dry-run", action="store_true", help="Print the email instead of sending it")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    token = secrets.token_hex(32)
    content = render_invitation_email(
        args.club,
        args.inviter,
        args.role,
        build_invitation_url(token),
        utcnow() + timedelta(days=settings.invitation_ttl_days),
        args.message,
    )
    if args.dry_run:
        print(f"To: {args.email}\nSubject: {content['subject']}\n\n{content['text']}")
        return 0

    if send_email(args.email, content["subject"], content["text"], content["html"]):
        logger.info(f"Test invitation sent to {args.email}")
        return 0
    logger.error(f"Test invitation to {args.email} was not sent")
    return 1


if __name__ == "__main__":
    sys.exit(main())
