"""Interactive command line interface for a temporary mailbox."""

import re
from typing import List, Optional

from .client import TempMailClient
from .config import ClientConfig, LoggingConfig
from .errors import TempMailError
from .logging import setup_logging
from .models import MailMessage

CODE_PATTERNS = [
    r'code[:\s]+([A-Z0-9]{4,8})',  # "code: XXXX"
    r'OTP[:\s]+(\d{4,8})',  # "OTP: 1234"
    r'verification code[:\s]+([A-Z0-9]{4,8})',
    r'pin[:\s]+(\d{4,6})',  # PIN codes
    r'\b\d{4,8}\b',  # bare 4-8 digit codes
]


def extract_codes(text: str) -> List[str]:
    """Extract verification codes/OTPs from email text, first match first"""
    codes: List[str] = []
    for pattern in CODE_PATTERNS:
        for match in re.findall(pattern, text or "", re.IGNORECASE):
            if match not in codes:
                codes.append(match)
    return codes


class TempMailCLI:
    """Command Line Interface for Temp Mail"""

    MENU = [
        ("1", "🆕 Start New Session"),
        ("2", "🌐 Show Available Domains"),
        ("3", "✏️  Change Email"),
        ("4", "🗑️  Delete Email and Get a New One"),
        ("5", "📬 Check Inbox"),
        ("6", "📧 Read Specific Email"),
        ("7", "⏳ Wait for Email (with timeout)"),
        ("8", "🔑 Extract Codes from Last Email"),
        ("9", "🚪 Exit"),
    ]

    def __init__(self, client: Optional[TempMailClient] = None):
        self.mail = client or TempMailClient(config=ClientConfig())
        self.actions = {
            "1": self.start_session,
            "2": self.show_domains,
            "3": self.change_email,
            "4": self.delete_email,
            "5": self.check_inbox,
            "6": self.read_specific_email,
            "7": self.wait_for_email,
            "8": self.extract_codes_from_last,
        }

    def run(self):
        """Run the CLI application"""
        print("\n" + "=" * 60)
        print("🚀 Temp Mail Client".center(60))
        print("=" * 60 + "\n")

        while True:
            print("\n📋 Menu:")
            for key, label in self.MENU:
                print(f"{key}. {label}")

            choice = input("\n👉 Enter your choice: ").strip()
            if choice == "9":
                print("\n👋 Bye! Thanks for using Temp Mail Client!")
                break
            action = self.actions.get(choice)
            if action is None:
                print("❌ Invalid choice! Please try again.")
                continue
            try:
                action()
            except TempMailError as e:
                print(f"❌ {e}")

    def start_session(self):
        email = self.mail.start_session()
        print(f"\n✅ Your temporary email: {email}")

    def show_domains(self):
        domains = self.mail.available_domains()
        print("\n🌐 Available Domains:")
        for i, domain in enumerate(domains, 1):
            print(f"{i}. {domain}")

    def change_email(self):
        login = input("Enter login: ").strip()
        domains = self.mail.available_domains()
        for i, domain in enumerate(domains, 1):
            print(f"{i}. {domain}")
        choice = input(f"Choose domain (1-{len(domains)}): ").strip()
        if not choice.isdigit() or not 1 <= int(choice) <= len(domains):
            print("❌ Invalid domain number!")
            return
        email = self.mail.change(login, domains[int(choice) - 1])
        print(f"\n✅ Email changed to: {email}")

    def delete_email(self):
        email = self.mail.delete()
        print(f"\n✅ Old email deleted, new email: {email}")

    def check_inbox(self):
        print(f"\n📬 Checking inbox for: {self.mail.email}")
        inbox = self.mail.inbox.refresh()

        if not inbox:
            print("📭 No emails yet!")
            return

        print(f"\n✉️  You have {len(inbox)} email(s):\n")
        for i, email in enumerate(inbox, 1):
            print(f"{i}. From: {email.sender}")
            print(f"   Subject: {email.subject}")
            print(f"   Date: {email.timestamp}")
            print()

    def read_specific_email(self):
        inbox = self.mail.inbox.messages or self.mail.inbox.refresh()
        if not inbox:
            print("📭 No emails in inbox!")
            return

        for i, email in enumerate(inbox, 1):
            print(f"{i}. {email.sender} - {email.subject}")
        choice = input("Enter email number to read: ").strip()

        if choice.isdigit() and 1 <= int(choice) <= len(inbox):
            self.display_email(self.mail.inbox.read(inbox[int(choice) - 1].id))
        else:
            print("❌ Invalid email number!")

    def wait_for_email(self):
        raw = input("Enter timeout in seconds (default 60): ").strip() or "60"
        if not raw.isdigit() or int(raw) == 0:
            print("❌ Invalid timeout!")
            return
        timeout = int(raw)
        print(f"⏳ Waiting for email (timeout: {timeout}s)...")
        summary = self.mail.inbox.wait_for_message(timeout=timeout)
        if summary is None:
            print("\n⏰ Timeout! No email received.")
            return
        print("📧 New email received!")
        self.display_email(self.mail.inbox.read(summary.id))

    def extract_codes_from_last(self):
        inbox = self.mail.inbox.refresh()
        if not inbox:
            print("📭 No emails in inbox!")
            return

        codes = extract_codes(self.mail.inbox.read(inbox[0].id).body)
        if codes:
            print("\n🔑 Extracted Codes:")
            for i, code in enumerate(codes, 1):
                print(f"{i}. {code}")
        else:
            print("❌ No codes found in the email!")

    def display_email(self, message: MailMessage):
        """Display email in formatted way"""
        print("\n" + "=" * 60)
        print(f"📧 From: {message.sender or 'Unknown'}")
        print(f"📌 Subject: {message.subject or 'No Subject'}")
        print(f"📅 Date: {message.timestamp or 'Unknown'}")
        print("=" * 60)
        print(f"\n{message.body}\n")

        codes = extract_codes(message.body)
        if codes:
            print("🔑 Detected Codes:")
            for i, code in enumerate(codes, 1):
                print(f"   {i}. {code}")

        print("=" * 60 + "\n")


def main():
    setup_logging(LoggingConfig())
    cli = TempMailCLI()
    try:
        cli.run()
    except (KeyboardInterrupt, EOFError):
        print("\n\n⏹️  Stopped!")
    finally:
        cli.mail.close()


if __name__ == "__main__":
    main()
