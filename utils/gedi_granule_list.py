# Copyright (c) 2021, University of Washington
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
# 3. Neither the name of the University of Washington nor the names of its
#    contributors may be used to endorse or promote products derived from this
#    software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE UNIVERSITY OF WASHINGTON AND CONTRIBUTORS
# “AS IS” AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED
# TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR
# PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE UNIVERSITY OF WASHINGTON OR
# CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL,
# EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS;
# OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY,
# WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR
# OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF
# ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

# example: python utils/gedi_granule_list.py --product GEDI02_B.002 --bbox="-73.65,-12.64,-47.81,9.7" --verbose

# Imports
import sys
import argparse
import gedifinder
from gedifinder import cmr, export

# Command Line Arguments
def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="""List the Data Pool urls of GEDI granules intersecting a region of interest""")
    parser.add_argument('--product',        '-p',   type=str,   required=True,  choices=cmr.products())
    parser.add_argument('--bbox',           '-b',   type=str,   default=None,   help='"<LL lon>,<LL lat>,<UR lon>,<UR lat>"')
    parser.add_argument('--roi',            '-r',   type=str,   default=None,   help='.geojson or .shp file with the region of interest')
    parser.add_argument('--output',         '-o',   type=str,   default=None,   help='output file (default: <product>_GranuleList_<timestamp>.txt)')
    parser.add_argument('--dir',            '-d',   type=str,   default=None,   help='directory of the default output file')
    parser.add_argument('--url',            '-u',   type=str,   default=gedifinder.Session.CMR_URL)
    parser.add_argument('--timeout',        '-t',   type=int,   default=60,     help='read timeout in seconds')
    parser.add_argument('--retries',                type=int,   default=2)
    parser.add_argument('--strict',                 action='store_true', default=False, help='fail on granule records without links')
    parser.add_argument('--verbose',        '-v',   action='store_true', default=False)
    parser.add_argument('--loglvl',         '-j',   type=str,   default="INFO")
    args = parser.parse_args(argv)
    if (args.bbox == None) == (args.roi == None):
        parser.error('exactly one of --bbox or --roi must be supplied')
    return args

# Main
def main(argv=None):
    args = parse_args(argv)

    # Initialize Client
    session = gedifinder.init(args.url, verbose=args.verbose, loglevel=args.loglvl, rqst_timeout=(10, args.timeout), retries=args.retries)

    # Find Granules
    try:
        bbox = args.bbox if args.bbox != None else gedifinder.tobbox(args.roi)
        granules = gedifinder.gedi_finder(args.product, bbox, strict=args.strict, rethrow=True, session=session)
    except gedifinder.FatalError as e:
        print(f'Failed to find {args.product} granules: {e}', file=sys.stderr)
        return 1

    # Export Granule List
    count, path = export.export(granules, product=args.product, path=args.output, directory=args.dir)
    print(f'Found {count} {args.product} granules, list saved to: {path}')
    return 0

if __name__ == '__main__':
    sys.exit(main())
