"""
Print a bcrypt hash of an admin PIN for use as ADMIN_PIN in .env.
Usage: python scripts/hash_pin.py 2025
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from coopledger.core.security import get_pin_hash


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Hash a 4-digit admin PIN")
    parser.add_argument("pin", help="4-digit PIN")
    args = parser.parse_args()

    if not (args.pin.isdigit() and len(args.pin) == 4):
        print("❌ PIN must be exactly 4 digits")
        sys.exit(1)

    print(f"ADMIN_PIN={get_pin_hash(args.pin)}")
