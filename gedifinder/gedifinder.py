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

import json
import logging
import geopandas
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
from gedifinder import cmr
from gedifinder.session import Session, FatalError

###############################################################################
# GLOBALS
###############################################################################

__all__ = [
    "Session", "DEFAULT_CRS", "init", "gedi_finder", "set_url", "set_provider", "set_verbose",
    "set_rqst_timeout", "set_retries", "tobbox", "formatbbox", "checksession"
]

DEFAULT_CRS = "EPSG:4326"
logger = logging.getLogger(__name__)
gedifinderSession = Session()

###############################################################################
# APIs
###############################################################################

#
#  Initialize
#
def init (
    url=Session.CMR_URL,
    verbose=False,
    loglevel=logging.INFO,
    provider=Session.PROVIDER,
    page_size=Session.PAGE_SIZE,
    rqst_timeout=(10, 60),
    retries=2,
    retry_backoff=1.0,
    ssl_verify=True,
    trust_env=False,
    log_handler=None,
    rethrow=False ):
    '''
    Initializes the Python client, replacing the global session used by the other calls in this module.

    Parameters
    ----------
        url:            str
                        CMR granule search endpoint
        verbose:        bool
                        sets up console logger as a convenience to user so all logs are printed to screen
        loglevel:       int
                        minimum severity of log message to output
        provider:       str
                        CMR data provider holding the collections (LPDAAC_ECS by default)
        page_size:      int
                        number of granules requested per page (2000 is the maximum CMR allows)
        rqst_timeout:   tuple
                        (<connection timeout in seconds>, <read timeout in seconds>)
        retries:        int
                        number of times a request failing with a transient error is retried
        retry_backoff:  float
                        seconds to wait between retries, multiplied by the attempt number
        ssl_verify:     bool
                        verify the certificate of the search endpoint
        trust_env:      bool
                        let requests pick up proxies and credentials from the environment
        log_handler:    logger
                        user provided logging handler
        rethrow:        bool
                        client rethrows exceptions to be handled by calling code

    Returns
    -------
    Session
        the new global session

    Examples
    --------
        >>> import gedifinder
        >>> gedifinder.init(verbose=True)
    '''
    global gedifinderSession
    gedifinderSession = Session(
        url=url,
        verbose=verbose,
        loglevel=loglevel,
        provider=provider,
        page_size=page_size,
        rqst_timeout=rqst_timeout,
        retries=retries,
        retry_backoff=retry_backoff,
        ssl_verify=ssl_verify,
        trust_env=trust_env,
        log_handler=log_handler,
        rethrow=rethrow)
    return gedifinderSession

#
#  GEDI Finder
#
def gedi_finder (product, bbox, strict=False, rethrow=False, session=None):
    '''
    Finds the GEDI granules of a product that intersect a bounding box

    Parameters
    ----------
        product:    str
                    one of ``GEDI01_B.002``, ``GEDI02_A.002``, ``GEDI02_B.002``
        bbox:       str
                    bounding box as ``"<LL lon>,<LL lat>,<UR lon>,<UR lat>"``; also accepts anything :func:`tobbox` does
        strict:     bool
                    raise an error on a granule record without links instead of skipping it
        rethrow:    bool
                    raise errors from the search endpoint instead of logging them and returning an empty list

    Returns
    -------
    list
        Data Pool urls of the intersecting granules, in catalog order

    Examples
    --------
        >>> import gedifinder
        >>> granules = gedifinder.gedi_finder('GEDI02_B.002', '-73.65,-12.64,-47.81,9.7')
        >>> granules[0]
        'https://e4ftl01.cr.usgs.gov/GEDI/GEDI02_B.002/2019.04.18/GEDI02_B_2019108002012_O01959_01_T03909_02_003_01_V002.h5'
    '''
    session = checksession(session)

    # resolve product before making any request
    concept = cmr.concept_id(product)

    # convert region to bounding box
    if not isinstance(bbox, str) or bbox.endswith((".geojson", ".shp")) or ("FeatureCollection" in bbox):
        bbox = tobbox(bbox)

    # query cmr and flatten records
    records = session.granules(concept, bbox, rethrow=rethrow)
    return cmr.extract_links(records, strict=strict)

#
#  set_url
#
def set_url (url, session=None):
    '''
    Configure the CMR granule search endpoint

    Examples
    --------
        >>> import gedifinder
        >>> gedifinder.set_url("https://cmr.uat.earthdata.nasa.gov/search/granules.json")
    '''
    session = checksession(session)
    session.url = url

#
#  set_provider
#
def set_provider (provider, session=None):
    session = checksession(session)
    session.provider = provider

#
#  set_verbose
#
def set_verbose (enable, loglevel=logging.INFO, session=None):
    '''
    Sets up a console logger to print log messages to screen

    If you want more control over the behavior of the log messages being captured, do not call this function but instead
    create and configure a Python log handler of your own and attach it to `gedifinder.logger`.

    Parameters
    ----------
        enable:     bool
                    True: creates console logger if it doesn't exist, False: destroys console logger if it does exist

        loglevel:   int
                    minimum severity of log message to output

    Examples
    --------
        >>> import gedifinder
        >>> gedifinder.set_verbose(True, loglevel=logging.INFO)
    '''
    session = checksession(session)
    session.set_verbose(enable, loglevel)

#
# set_rqst_timeout
#
def set_rqst_timeout (timeout, session=None):
    '''
    Sets the TCP/IP connection and reading timeouts for future requests made to CMR.

    Parameters
    ----------
        timeout:    tuple
                    (<connection timeout in seconds>, <read timeout in seconds>)

    Examples
    --------
        >>> import gedifinder
        >>> gedifinder.set_rqst_timeout((10, 60))
    '''
    session = checksession(session)
    if type(timeout) == tuple:
        session.rqst_timeout = timeout
    else:
        raise FatalError('timeout must be a tuple (<connection timeout>, <read timeout>)')

#
# set_retries
#
def set_retries (retries, backoff=None, session=None):
    '''
    Sets how many times a request failing with a connection error, a timeout, or a server error is retried,
    and optionally the backoff in seconds (multiplied by the attempt number) between attempts
    '''
    session = checksession(session)
    if type(retries) != int or retries < 0:
        raise FatalError('retries must be a non-negative integer')
    session.retries = retries
    if backoff is not None:
        session.retry_backoff = backoff

#
# Format Bounding Box
#
def tobbox (source):
    '''
    Convert a GeoJSON/Shapefile/GeoDataFrame/shapely/list representation of a region of interest into the bounding box string used by CMR

    Parameters
    ----------
        source:     str
                    file name of GeoJSON formatted regions of interest, file **must** have name with the .geojson suffix
                    file name of ESRI Shapefile formatted regions of interest, file **must** have name with the .shp suffix
                    GeoDataFrame of region of interest
                    shapely Polygon or MultiPolygon in EPSG:4326
                    GeoJSON dictionary or string
                    list of lon/lat dictionaries forming a polygon (e.g. [{"lon": lon1, "lat": lat1}, ...])
                    list of values forming a bounding box (e.g. [lon1, lat1, lon2, lat2])
                    bounding box string (e.g. "lon1,lat1,lon2,lat2")

    Returns
    -------
    str
        bounding box as ``"<min lon>,<min lat>,<max lon>,<max lat>"``

    Examples
    --------
        >>> import gedifinder
        >>> gedifinder.tobbox([-73.65, -12.64, -47.81, 9.7])
        '-73.65,-12.64,-47.81,9.7'
    '''
    # GeoDataFrame
    if isinstance(source, geopandas.GeoDataFrame):
        gdf = source

    # Shapely Geometry
    elif isinstance(source, BaseGeometry):
        gdf = geopandas.GeoDataFrame(geometry=[source], crs=DEFAULT_CRS)

    # bounding box as [lon lat lon lat]
    elif isinstance(source, (list, tuple)) and (len(source) == 4) and not isinstance(source[0], dict):
        return formatbbox(*source)

    # List of lat/lon dictionaries
    elif isinstance(source, list) and (len(source) >= 3) and isinstance(source[0], dict):
        p = Polygon([(c["lon"], c["lat"]) for c in source])
        gdf = geopandas.GeoDataFrame(geometry=[p], crs=DEFAULT_CRS)

    # Shapefile or GeoJSON file
    elif isinstance(source, str) and (source.endswith(".shp") or source.endswith(".geojson")):
        gdf = geopandas.read_file(source)

    # GeoJSON dictionary
    elif isinstance(source, dict) and ("features" in source):
        gdf = geopandas.GeoDataFrame.from_features(source["features"], crs=DEFAULT_CRS)

    # GeoJSON string
    elif isinstance(source, str) and (source.find("FeatureCollection") > 0):
        geojson_dict = json.loads(source)
        gdf = geopandas.GeoDataFrame.from_features(geojson_dict["features"], crs=DEFAULT_CRS)

    # bounding box string
    elif isinstance(source, str) and (source.count(",") == 3):
        return formatbbox(*source.split(","))

    # Unsupported
    else:
        raise FatalError("unsupported region: please use a .geojson, .shp, geodataframe, polygon, or bounding box")

    # empty region
    if len(gdf) == 0:
        raise FatalError("region of interest contains no geometry")

    # project to geographic coordinates
    if gdf.crs is not None and not gdf.crs.is_geographic:
        gdf = gdf.to_crs(DEFAULT_CRS)

    # return bounds of all geometries
    minx, miny, maxx, maxy = gdf.total_bounds
    return formatbbox(minx, miny, maxx, maxy)

###############################################################################
# INTERNAL APIs
###############################################################################

#
# Format Bounding Box Values
#
def formatbbox (min_lon, min_lat, max_lon, max_lat):
    try:
        values = [float(v) for v in (min_lon, min_lat, max_lon, max_lat)]
    except (TypeError, ValueError):
        raise FatalError(f'bounding box must contain four numbers: {min_lon}, {min_lat}, {max_lon}, {max_lat}')
    return ",".join([str(v) for v in values])

#
# Set Session
#
def checksession (session):
    global gedifinderSession
    return session if session != None else gedifinderSession
