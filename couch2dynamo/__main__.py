import sys

from couch2dynamo.cli import main

if __name__ == "__main__":
    sys.exit(main())
