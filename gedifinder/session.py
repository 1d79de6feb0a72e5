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
import time
import json
import logging
import requests
from gedifinder import version

###############################################################################
# LOGGING
###############################################################################

logger = logging.getLogger(__name__)
packagelogger = logging.getLogger("gedifinder")

LOGLEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARN,
    "ERROR": logging.ERROR,
    "FATAL": logging.FATAL,
    "CRITICAL": logging.CRITICAL
}

###############################################################################
# CLASSES
###############################################################################

#
# FatalError
#
class FatalError(RuntimeError):
    pass

#
# InvalidProductError
#
class InvalidProductError(FatalError):
    pass

#
# RemoteQueryError
#
class RemoteQueryError(FatalError):
    '''
    non-200 response from the search endpoint; the messages the service
    reported are kept verbatim in ``errors``
    '''
    def __init__(self, message, errors=None, status_code=None):
        super().__init__(message)
        self.errors = errors if errors != None else []
        self.status_code = status_code

#
# MalformedResponseError
#
class MalformedResponseError(FatalError):
    pass

#
# EmptyLinkRecordError
#
class EmptyLinkRecordError(FatalError):
    pass

#
# Session
#
class Session:

    CMR_URL = os.getenv("GEDIFINDER_CMR_URL") or "https://cmr.earthdata.nasa.gov/search/granules.json"
    PROVIDER = "LPDAAC_ECS"
    PAGE_SIZE = 2000 # maximum allowed by CMR

    #
    # constructor
    #
    def __init__ (self,
        url             = CMR_URL,
        provider        = PROVIDER,
        page_size       = PAGE_SIZE,
        verbose         = False,
        loglevel        = logging.INFO,
        trust_env       = False,
        ssl_verify      = True,
        rqst_timeout    = (10, 60), # (connection, read) in seconds
        retries         = 2,
        retry_backoff   = 1.0, # seconds, multiplied by attempt number
        log_handler     = None,
        rethrow         = False):
        '''
        creates and configures a CMR search session
        '''
        # configure parameter arguments
        self.session = requests.Session()
        self.session.trust_env = trust_env
        self.ssl_verify = ssl_verify
        self.rqst_timeout = rqst_timeout
        self.retries = retries
        self.retry_backoff = retry_backoff
        self.throw_exceptions = rethrow

        # configure search endpoint
        self.url = url
        self.provider = provider
        self.set_page_size(page_size)

        # configure logging
        self.console = None
        self.set_verbose(verbose, loglevel)
        if log_handler != None:
            packagelogger.addHandler(log_handler)

    #
    #  granules
    #
    def granules (self, concept_id, bbox, rethrow=False):
        '''
        returns every catalog record of the collection intersecting the
        bounding box, in catalog order, concatenated across pages
        '''
        # remove any white space from bounding box
        bbox = "".join(bbox.split())

        # initialize query
        page = 1
        parm = {
            "provider": self.provider,
            "page_size": self.page_size,
            "concept_id": concept_id,
            "bounding_box": bbox,
            "pageNum": page
        }

        # query pages until a page comes back short
        records = []
        try:
            entries = self.fetch(parm)
            records += entries
            while len(entries) > 0 and len(entries) % self.page_size == 0:
                page += 1
                parm["pageNum"] = page
                logger.debug(f'Page {page - 1} of {concept_id} was full, requesting page {page}')
                entries = self.fetch(parm)
                records += entries
        except MalformedResponseError as e:
            logger.error(f'Aborting query of {concept_id}: {e}')
            raise
        except FatalError as e:
            if self.throw_exceptions or rethrow:
                raise
            logger.error(f'Error in request to {self.url}: {e}')
            return []

        # return records
        logger.info(f'Found {len(records)} granules of {concept_id} intersecting {bbox} ({page} pages)')
        return records

    #
    #  fetch
    #
    def fetch (self, parm, retries=None):
        '''
        handles making a single HTTP request to the search endpoint and
        returns the list of entries in the response feed
        '''
        # initialize local variables
        rsps = {}
        error = None
        headers = {'Client-Id': f'gedifinder-python-{version.full_version}'}
        if retries == None:
            retries = self.retries

        # status helper function
        def retry_status(attempt):
            return f"attempt {1 + retries - attempt} of {1 + retries} to {self.url}"

        # Attempt request
        complete = False
        remaining_attempts = 1 + retries
        while not complete and remaining_attempts > 0:
            remaining_attempts -= 1
            try:
                # Perform Request
                data = self.session.get(self.url, params=parm, headers=headers, timeout=self.rqst_timeout, verify=self.ssl_verify)

                # Parse Response
                rsps = self.__parse(data)

                # Handle Error Codes
                data.raise_for_status()
                if data.status_code != 200:
                    raise requests.HTTPError(f"{data.status_code} {data.reason}", response=data)

                # Success
                complete = True

            except requests.exceptions.SSLError as e:
                error = FatalError('Unable to verify SSL certificate')
                break # skip retries

            except requests.Timeout as e:
                error = FatalError('Timed-out waiting for response')

            except requests.ConnectionError as e:
                error = FatalError('Connection error')

            except requests.exceptions.ChunkedEncodingError as e:
                error = FatalError('Unexpected termination of response')

            except requests.HTTPError as e:
                status_code = e.response.status_code
                errors = self.__errors(rsps, e.response)
                error = RemoteQueryError(f'HTTP error <{status_code}> {"; ".join(errors)}', errors=errors, status_code=status_code)
                if status_code < 500:
                    break # skip retries

            except requests.RequestException as e:
                error = FatalError(f'Exception processing request: {e}')
                break # skip retries

            # Log Reason for Not Completing
            if not complete:
                logger.error(f'{error}... {retry_status(remaining_attempts)}')
                if remaining_attempts > 0 and self.retry_backoff > 0:
                    time.sleep(self.retry_backoff * (1 + retries - remaining_attempts))

        # Check Complete
        if not complete:
            raise error

        # Return Entries
        return self.__entries(rsps)

    #
    #  set_verbose
    #
    def set_verbose (self, enable, loglevel=logging.INFO):
        '''
        set verbosity of log messages by adding/removing the console log
        handler and by setting the log level
        '''
        # massage loglevel parameter if passed in as a string
        if isinstance(loglevel, str):
            loglevel = LOGLEVELS.get(loglevel.upper(), logging.INFO)

        # enable/disable logging to console
        if (enable == True) and (self.console == None):
            self.console = logging.StreamHandler()
            packagelogger.addHandler(self.console)
        elif (enable == False) and (self.console != None):
            packagelogger.removeHandler(self.console)
            self.console = None

        # always set level to requested
        packagelogger.setLevel(loglevel)
        if self.console != None:
            self.console.setLevel(loglevel)

    #
    #  set_page_size
    #
    def set_page_size (self, page_size):
        if not isinstance(page_size, int) or page_size <= 0:
            raise FatalError(f'page size must be a positive integer: {page_size}')
        self.page_size = page_size

    #
    #  __parse
    #
    def __parse (self, data):
        '''
        data: request response
        '''
        try:
            return data.json()
        except ValueError:
            return data.text

    #
    #  __entries
    #
    def __entries (self, rsps):
        try:
            entries = rsps["feed"]["entry"]
        except (KeyError, TypeError):
            raise MalformedResponseError(f'Response from {self.url} is missing feed entries: {str(rsps)[:200]}')
        if not isinstance(entries, list):
            raise MalformedResponseError(f'Response from {self.url} has feed entries of type {type(entries).__name__}')
        return entries

    #
    #  __errors
    #
    def __errors (self, rsps, response):
        '''
        pulls the messages reported by the service out of an error response
        '''
        if isinstance(rsps, dict) and isinstance(rsps.get("errors"), list):
            return [error if isinstance(error, str) else json.dumps(error) for error in rsps["errors"]]
        elif isinstance(rsps, str) and len(rsps) > 0:
            return [rsps]
        else:
            return [response.reason or "unknown error"]
