"""
Gulf of Alaska Ecopath mask and ROMS extraction tools
"""

import argparse

import goa_ecopath


def main():
    """
    Entry point for the main script ``goa_ecopath``
    """

    parser = argparse.ArgumentParser(
        description=__doc__, formatter_class=argparse.RawTextHelpFormatter)
    parser.add_argument('-v', '--version',
                        action='version',
                        version='goa_ecopath {}'.format(
                            goa_ecopath.__version__),
                        help="Show version number and exit")

    parser.parse_args()


if __name__ == "__main__":
    main()
