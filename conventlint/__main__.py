import sys

from conventlint.cli import main

sys.exit(main())
