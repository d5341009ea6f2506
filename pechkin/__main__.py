import sys

from pechkin.cli import main

sys.exit(main())
