#!/usr/bin/env python3
"""
Environment Configuration Generator for the Pharmacy Stock front-end

This script generates a .env file with:
- Cryptographically secure SECRET_KEY for Flask sessions (the backend token
  is stored in the signed session cookie)
- Backend API location and timeout
- Other environment variables

Usage:
    python generate_env.py                                  # Interactive mode
    python generate_env.py --force                          # Overwrite existing .env
    python generate_env.py --dev                            # Development mode (HTTP, predictable key)
    python generate_env.py --api-url https://host/api       # Backend API root
"""

import argparse
import os
import secrets
import shutil
import sys
from datetime import datetime
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8080/api"


class EnvGenerator:
    """Generate environment configuration"""

    def __init__(self, dev_mode=False, api_url=DEFAULT_API_URL):
        self.dev_mode = dev_mode
        self.api_url = api_url
        self.env_file = Path(__file__).parent / '.env'

    def generate_secret_key(self, length=64):
        """Generate a cryptographically secure secret key"""
        if self.dev_mode:
            return "dev-secret-key-DO-NOT-USE-IN-PRODUCTION"
        return secrets.token_hex(length)

    def create_env_content(self):
        """Create the full .env file content"""
        secret_key = self.generate_secret_key()
        secure = 'False' if self.dev_mode else 'True'

        content = f"""# Pharmacy Stock Environment Configuration
# Generated: {self._get_timestamp()}
#
# SECURITY WARNING: Keep this file secret! Never commit to version control!

# ============================================================================
# Flask Configuration
# ============================================================================

# Secret key for session signing and CSRF protection
# The backend bearer token lives in the signed session cookie
SECRET_KEY={secret_key}

# Flask debug mode: 'True' or 'False'
# WARNING: NEVER set to True in production!
FLASK_DEBUG=False

# Enable/disable Flask reloader (useful for development)
USE_RELOADER=False

# Server host (0.0.0.0 = all interfaces, 127.0.0.1 = localhost only)
FLASK_HOST=127.0.0.1

# Server port
FLASK_PORT=5000

# ============================================================================
# Backend API
# ============================================================================

# Root of the inventory REST API (every path is appended to it)
API_BASE_URL={self.api_url}

# Seconds before a backend call is abandoned
API_TIMEOUT_SECONDS=15

# Default rows per page on the item list
ITEMS_PAGE_SIZE=10

# ============================================================================
# Security Settings
# ============================================================================

# Set to True in production when using HTTPS, False for development/HTTP only
ENABLE_HTTPS={secure}

# Automatically redirect HTTP to HTTPS (requires ENABLE_HTTPS=True)
FORCE_HTTPS_REDIRECT={secure}

SESSION_COOKIE_SECURE={secure}
REMEMBER_COOKIE_SECURE={secure}

# Session lifetime in seconds (default: 3600 = 1 hour)
PERMANENT_SESSION_LIFETIME=3600

# Login rate limiting
RATELIMIT_ENABLED=True

# Server-side store for movement dialogs. SimpleCache lives in one process;
# with several workers use FileSystemCache and set CACHE_DIR
CACHE_TYPE=SimpleCache
# CACHE_DIR=instance/cache

# ============================================================================
# Logging Configuration
# ============================================================================

# Console log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_LEVEL=INFO

# Directory of the rotating JSON log file
LOG_DIR=logs
"""
        return content, {'secret_key': secret_key, 'api_url': self.api_url}

    def _get_timestamp(self):
        """Get current timestamp for documentation"""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def file_exists(self):
        """Check if .env file already exists"""
        return self.env_file.exists()

    def create_backup(self):
        """Create backup of existing .env file"""
        if not self.file_exists():
            return None

        backup_path = self.env_file.parent / f'.env.backup.{self._get_timestamp().replace(":", "-").replace(" ", "_")}'
        shutil.copy2(self.env_file, backup_path)
        return backup_path

    def write_env_file(self, content):
        """Write content to .env file"""
        with open(self.env_file, 'w') as f:
            f.write(content)

        # Set file permissions to 600 (owner read/write only)
        os.chmod(self.env_file, 0o600)

    def display_summary(self, values):
        """Display what was generated"""
        print("\n" + "=" * 80)
        print("GENERATED CONFIGURATION")
        print("=" * 80)

        if not self.dev_mode:
            print("\nFlask Secret Key:")
            print(f"   {values['secret_key'][:20]}...{values['secret_key'][-20:]}")
            print(f"   (Length: {len(values['secret_key'])} characters)")
        else:
            print("\nFlask Secret Key: dev-secret-key-DO-NOT-USE-IN-PRODUCTION")

        print("\nBackend API:")
        print(f"   {values['api_url']}")

        print("\nNext Steps:")
        print("   1. Make sure the backend API is running")
        print("   2. Run: python app.py --check-backend")
        print("   3. Run: python app.py")
        print("   4. Login with an employee account of the backend")

        if self.dev_mode:
            print("\nDEV MODE: HTTPS and secure cookies are disabled!")
            print("   DO NOT use this configuration in production!")

        print("\n" + "=" * 80 + "\n")

    def generate(self, force=False):
        """
        Generate .env file

        Args:
            force: Overwrite existing .env file without prompting
        """
        if self.file_exists() and not force:
            print(f"\nFile {self.env_file} already exists!")
            response = input("Do you want to overwrite it? (yes/no): ").lower().strip()

            if response not in ['yes', 'y']:
                print("Aborted. Existing .env file was not modified.")
                return False

            backup_path = self.create_backup()
            if backup_path:
                print(f"Backup created: {backup_path}")

        print("\nGenerating environment configuration...")
        content, values = self.create_env_content()

        self.write_env_file(content)
        print(f"Created: {self.env_file}")

        self.display_summary(values)
        return True


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='Generate .env configuration for the Pharmacy Stock front-end',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python generate_env.py                              # Interactive mode
  python generate_env.py --force                      # Overwrite without prompting
  python generate_env.py --dev                        # Development mode
  python generate_env.py --api-url http://api:8080/api

Security Notes:
  - Generated .env file will have 600 permissions (owner read/write only)
  - Secret key is 128 characters (64 bytes hex)
        """
    )

    parser.add_argument(
        '--force', '-f',
        action='store_true',
        help='Overwrite existing .env file without prompting'
    )

    parser.add_argument(
        '--dev', '-d',
        action='store_true',
        help='Development mode: HTTP and a predictable key (NOT FOR PRODUCTION!)'
    )

    parser.add_argument(
        '--api-url',
        default=DEFAULT_API_URL,
        help=f'Backend API root (default: {DEFAULT_API_URL})'
    )

    args = parser.parse_args()

    print("\n" + "=" * 80)
    print("Pharmacy Stock - Environment Generator")
    print("=" * 80)

    if args.dev:
        print("\nWARNING: Development mode enabled!")
        print("    This will generate an INSECURE configuration for development only.\n")

    generator = EnvGenerator(dev_mode=args.dev, api_url=args.api_url)
    success = generator.generate(force=args.force)

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
