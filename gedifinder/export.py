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

import os
import logging
from datetime import datetime
from gedifinder.session import FatalError

logger = logging.getLogger(__name__)

#
#  Granule List Name
#
def granule_list_name (product, timestamp=None):
    '''
    Builds the default name of a granule list file, e.g. ``GEDI02_B_002_GranuleList_20260105143000.txt``
    '''
    if timestamp is None:
        timestamp = datetime.now()
    return f"{product.replace('.', '_')}_GranuleList_{timestamp.strftime('%Y%m%d%H%M%S')}.txt"

#
#  Export
#
def export (links, product=None, path=None, directory=None):
    '''
    Writes granule urls to a text file, one url per line

    Parameters
    ----------
        links:      list
                    granule urls
        product:    str
                    product the urls belong to, used to name the file when no path is supplied
        path:       str
                    output file; when omitted a timestamped name is built from the product
        directory:  str
                    directory the default file name is placed in (current directory by default)

    Returns
    -------
    int
        number of urls written
    str
        absolute path of the file written

    Examples
    --------
        >>> import gedifinder
        >>> from gedifinder import export
        >>> urls = gedifinder.gedi_finder('GEDI02_B.002', '-73.65,-12.64,-47.81,9.7')
        >>> count, path = export.export(urls, product='GEDI02_B.002')
    '''
    # determine output file
    if path is None:
        if product is None:
            raise FatalError('either a product or an output path must be supplied')
        path = os.path.join(directory or os.getcwd(), granule_list_name(product))
    path = os.path.abspath(path)

    # write urls
    count = 0
    with open(path, mode='w', encoding='utf-8') as file:
        for link in links:
            file.write(f'{link}\n')
            count += 1

    # report destination
    if product is not None:
        logger.info(f'File containing links to {count} intersecting {product} granules has been saved to: {path}')
    else:
        logger.info(f'File containing links to {count} granules has been saved to: {path}')
    return count, path
