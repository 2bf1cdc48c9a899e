"""Allow ``python -m propolis_brand``."""

from propolis_brand.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
