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

import logging
from types import MappingProxyType
from gedifinder.session import InvalidProductError, EmptyLinkRecordError

logger = logging.getLogger(__name__)

#
# GEDI Version 2 collections hosted by the LP DAAC, keyed by <short name>.<version>
#
CONCEPT_IDS = MappingProxyType({
    'GEDI01_B.002': 'C1908344278-LPDAAC_ECS',
    'GEDI02_A.002': 'C1908348134-LPDAAC_ECS',
    'GEDI02_B.002': 'C1908350066-LPDAAC_ECS'
})

#
#  Products
#
def products ():
    '''
    Returns the GEDI products that can be searched

    Returns
    -------
    list
        product names as ``<short name>.<version>``

    Examples
    --------
        >>> from gedifinder import cmr
        >>> cmr.products()
        ['GEDI01_B.002', 'GEDI02_A.002', 'GEDI02_B.002']
    '''
    return list(CONCEPT_IDS.keys())

#
#  Concept ID
#
def concept_id (product):
    '''
    Maps a GEDI product to the CMR concept id of its collection

    Parameters
    ----------
        product:    str
                    one of ``GEDI01_B.002``, ``GEDI02_A.002``, ``GEDI02_B.002``

    Returns
    -------
    str
        CMR collection concept id

    Examples
    --------
        >>> from gedifinder import cmr
        >>> cmr.concept_id('GEDI02_B.002')
        'C1908350066-LPDAAC_ECS'
    '''
    try:
        return CONCEPT_IDS[product]
    except (KeyError, TypeError):
        raise InvalidProductError(f'{product} is not a supported product, must be one of: {", ".join(CONCEPT_IDS)}')

#
#  Extract Links
#
def extract_links (records, strict=False):
    '''
    Flattens CMR granule records into the url of their first link, which for
    LP DAAC collections is the Data Pool download location of the granule

    Parameters
    ----------
        records:    list
                    ``feed.entry`` records returned by a CMR granule search
        strict:     bool
                    raise an error on a record without links instead of skipping it

    Returns
    -------
    list
        urls in the same order as the records
    '''
    links = []
    for index, record in enumerate(records):
        try:
            links.append(record["links"][0]["href"])
        except (KeyError, IndexError, TypeError):
            title = record.get("title", record.get("id", index)) if isinstance(record, dict) else index
            if strict:
                raise EmptyLinkRecordError(f'Granule record {title} has no links')
            logger.warning(f'Skipping granule record {title}: no links')
    return links
