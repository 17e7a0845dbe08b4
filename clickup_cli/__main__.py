import sys

from clickup_cli.cli import main

sys.exit(main())
