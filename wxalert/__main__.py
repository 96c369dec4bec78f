import sys

from wxalert.cli import main

sys.exit(main())
