# Copyright 2017 The OpenSDS Authors.
# All Rights Reserved.
#
#    Licensed under the Apache License, Version 2.0 (the "License"); you may
#    not use this file except in compliance with the License. You may obtain
#    a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
#    WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
#    License for the specific language governing permissions and limitations
#    under the License.

"""REST client for the OpenSDS controller."""

from oslo_config import cfg
from oslo_log import log as logging
import requests

from nbp.common import config  # noqa Need to register opensds opts
from nbp import exception

CONF = cfg.CONF
LOG = logging.getLogger(__name__)


class OpenSDSClient(object):
    """Volume, attachment and profile calls against the OpenSDS API.

    Every failure, whether the controller could not be reached or it
    answered with an error status, is raised as OpenSDSAPIException.
    """

    def __init__(self, endpoint, api_version='v1beta',
                 tenant_id='adminTenantId', timeout=60):
        """Initialize the OpenSDS REST API client.

        :param endpoint: URL of the OpenSDS controller
        :param api_version: API version prefix of every request path
        :param tenant_id: Tenant the requests are made for
        :param timeout: API call timeout in seconds
        """
        self.endpoint = endpoint.rstrip('/')
        self.api_version = api_version
        self.tenant_id = tenant_id
        self.timeout = timeout

        self.base_url = "%s/%s/%s" % (self.endpoint, api_version, tenant_id)
        self.session = requests.Session()

    def _request(self, method, path, data=None):
        """Make an HTTP request to the OpenSDS API.

        :param method: HTTP method (GET, POST, DELETE)
        :param path: Path relative to the tenant base URL
        :param data: Request body data
        :returns: Response JSON data, None for an empty body
        :raises OpenSDSAPIException: If the request fails
        """
        url = self.base_url + path
        LOG.debug("OpenSDS request: %(method)s %(url)s",
                  {'method': method, 'url': url})
        try:
            response = self.session.request(
                method,
                url,
                json=data,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise exception.OpenSDSAPIException(
                data="%s %s: %s" % (method, url, e))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise exception.OpenSDSAPIException(
                data="%s %s: invalid JSON body %r" % (method, url,
                                                      response.text))

    def _create(self, path, data):
        """POST a new resource and return it, insisting on an id."""
        body = self._request('POST', path, data=data)
        if not isinstance(body, dict) or not body.get('id'):
            raise exception.OpenSDSAPIException(
                data="POST %s%s: no resource id in response %r" %
                (self.base_url, path, body))
        return body

    def create_volume(self, spec):
        """Create a volume.

        :param spec: dict with name, description, size and metadata
        :returns: the created volume
        """
        return self._create('/block/volumes', spec)

    def delete_volume(self, volume_id, opts=None):
        return self._request('DELETE', '/block/volumes/%s' % volume_id,
                             data=opts)

    def create_volume_attachment(self, spec):
        """Export a volume to a host.

        :param spec: dict with volumeId, hostInfo and metadata
        :returns: the created attachment, its connectionInfo tells the
                  host how to reach the volume
        """
        return self._create('/block/attachments', spec)

    def delete_volume_attachment(self, attachment_id, opts=None):
        return self._request('DELETE',
                             '/block/attachments/%s' % attachment_id,
                             data=opts)

    def list_profiles(self):
        return self._request('GET', '/profiles') or []


def get_client(endpoint=None):
    """Build a client for the configured (or given) OpenSDS endpoint."""
    return OpenSDSClient(endpoint or CONF.opensds.endpoint,
                         api_version=CONF.opensds.api_version,
                         tenant_id=CONF.opensds.tenant_id,
                         timeout=CONF.opensds.api_timeout)
