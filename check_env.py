#!/usr/bin/env python3
"""Helper script to check and create the .env file for the route engine."""

from pathlib import Path
import os
import sys

ENV_PREFIX = "DELIVERYPRO_"

TEMPLATE = """# API Configuration
DELIVERYPRO_API_PREFIX=/api
# DELIVERYPRO_FRONTEND_ALLOWED_ORIGINS - Leave commented to use defaults
# JSON array: ["http://localhost:5173"] or comma-separated: http://localhost:5173,http://127.0.0.1:5173

# Route limits
DELIVERYPRO_MAX_DELIVERIES=25
DELIVERYPRO_DEFAULT_SERVICE_MINUTES=5
DELIVERYPRO_FUEL_PRICE_PER_LITER=1.5

# Provider pacing (seconds)
DELIVERYPRO_GEOCODE_CALL_DELAY_SECONDS=0.05
DELIVERYPRO_GEOCODE_BATCH_DELAY_SECONDS=0.5
DELIVERYPRO_PROVIDER_TIMEOUT_SECONDS=10
"""


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("DeliveryPro Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print()
    else:
        print(f"✅ Found .env file at: {env_file}")
        print()

    overrides = sorted(name for name in os.environ if name.startswith(ENV_PREFIX))
    if overrides:
        print("Environment overrides:")
        for name in overrides:
            print(f"  {name}={os.environ[name]}")
        print()

    print("Testing config loading...")
    print()
    try:
        sys.path.insert(0, str(project_root / "src"))
        from deliverypro.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print()
        print("Troubleshooting:")
        print(f"1. Make sure variables start with {ENV_PREFIX} prefix")
        print("2. Make sure numeric values are positive numbers")
        print("3. Restart backend after editing .env")
        return 1

    for name, value in settings.model_dump().items():
        print(f"  {name}: {value}")
    print()
    print("=" * 60)
    print("✅ SUCCESS: configuration is valid")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
