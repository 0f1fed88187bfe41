"""python -m depsize"""

from depsize.cli import main

main()
