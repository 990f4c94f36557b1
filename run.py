#!/usr/bin/env python3
"""
TRADOS Translator - Local Server
================================
Launch the TRADOS Translator API on localhost.

Usage:
    python run.py
    python run.py --no-browser
"""
import os
import sys
import threading
import time
import webbrowser
from pathlib import Path

package_dir = Path(__file__).parent

if getattr(sys, 'frozen', False):
    APP_DIR = os.path.dirname(sys.executable)
else:
    APP_DIR = str(package_dir)

# Set environment for config before the package is imported
os.environ.setdefault('TRADOS_APP_DIR', APP_DIR)


class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'


def print_banner(url: str):
    """Display startup banner"""
    print(f"\n{Colors.CYAN}{'='*60}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.GREEN}  TRADOS TRANSLATOR{Colors.RESET}")
    print(f"{Colors.CYAN}{'='*60}{Colors.RESET}")
    print(f"  Server: {url}")
    print(f"  Working Directory: {APP_DIR}")
    print(f"{Colors.CYAN}{'='*60}{Colors.RESET}\n")


def main():
    """Main entry point"""
    from trados_translator.app import create_app
    from trados_translator.config import config

    url = f'http://{config.server.host}:{config.server.port}'
    print_banner(url)

    if not config.gemini.api_key:
        print(f"{Colors.YELLOW}   GEMINI_API_KEY not set; save a key via PUT /api/settings{Colors.RESET}\n")

    if '--no-browser' not in sys.argv:
        def open_browser():
            time.sleep(1.5)
            webbrowser.open(f'{url}/api/health')

        threading.Thread(target=open_browser, daemon=True).start()

    app = create_app()
    app.run(host=config.server.host, port=config.server.port, debug=False, use_reloader=False, threaded=True)


if __name__ == '__main__':
    main()
