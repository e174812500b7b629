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

from unittest import mock

import ddt
import requests

from nbp.client import opensds
from nbp import exception
from nbp import test

ENDPOINT = 'http://127.0.0.1:50040'
BASE_URL = ENDPOINT + '/v1beta/adminTenantId'


def _response(status=200, body=b'{}'):
    resp = requests.Response()
    resp.status_code = status
    resp._content = body
    resp.url = BASE_URL
    return resp


@ddt.ddt
class OpenSDSClientTestCase(test.TestCase):

    def setUp(self):
        super(OpenSDSClientTestCase, self).setUp()
        self.client = opensds.OpenSDSClient(ENDPOINT + '/')
        self.mock_request = self.mock_object(self.client.session, 'request')
        self.mock_request.return_value = _response()

    def _assert_request(self, method, path, data=None):
        self.mock_request.assert_called_once_with(
            method, BASE_URL + path, json=data,
            headers={'Content-Type': 'application/json'}, timeout=60)

    def test_base_url(self):
        self.assertEqual(BASE_URL, self.client.base_url)

    def test_create_volume(self):
        self.mock_request.return_value = _response(
            body=b'{"id": "vol-1", "name": "vol"}')
        spec = {'name': 'vol', 'description': '', 'size': 1,
                'metadata': {}}

        vol = self.client.create_volume(spec)

        self.assertEqual({'id': 'vol-1', 'name': 'vol'}, vol)
        self._assert_request('POST', '/block/volumes', spec)

    def test_delete_volume(self):
        self.mock_request.return_value = _response(body=b'')
        self.assertIsNone(self.client.delete_volume('vol-1'))
        self._assert_request('DELETE', '/block/volumes/vol-1')

    def test_create_volume_attachment(self):
        self.mock_request.return_value = _response(
            body=b'{"id": "atc-1", "connectionInfo": {}}')
        spec = {'volumeId': 'vol-1', 'hostInfo': {}, 'metadata': {}}

        atc = self.client.create_volume_attachment(spec)

        self.assertEqual('atc-1', atc['id'])
        self._assert_request('POST', '/block/attachments', spec)

    @ddt.data(b'', b'{}', b'[]', b'"vol-1"', b'{"id": ""}',
              b'{"name": "vol"}')
    def test_create_without_resource_id(self, body):
        self.mock_request.return_value = _response(body=body)
        self.assertRaises(exception.OpenSDSAPIException,
                          self.client.create_volume, {})
        self.assertRaises(exception.OpenSDSAPIException,
                          self.client.create_volume_attachment, {})

    def test_delete_volume_attachment(self):
        self.client.delete_volume_attachment('atc-1')
        self._assert_request('DELETE', '/block/attachments/atc-1')

    def test_list_profiles(self):
        self.mock_request.return_value = _response(
            body=b'[{"id": "prf-1", "name": "default"}]')
        self.assertEqual([{'id': 'prf-1', 'name': 'default'}],
                         self.client.list_profiles())
        self._assert_request('GET', '/profiles')

    def test_list_profiles_empty_body(self):
        self.mock_request.return_value = _response(body=b'')
        self.assertEqual([], self.client.list_profiles())

    def test_error_status(self):
        self.mock_request.return_value = _response(
            status=500, body=b'{"message": "boom"}')
        exc = self.assertRaises(exception.OpenSDSAPIException,
                                self.client.create_volume, {})
        self.assertIn('POST %s/block/volumes' % BASE_URL, str(exc))

    def test_connection_error(self):
        self.mock_request.side_effect = requests.exceptions.ConnectionError(
            'refused')
        self.assertRaises(exception.OpenSDSAPIException,
                          self.client.list_profiles)

    def test_invalid_json(self):
        self.mock_request.return_value = _response(body=b'not json')
        exc = self.assertRaises(exception.OpenSDSAPIException,
                                self.client.list_profiles)
        self.assertIn('invalid JSON body', str(exc))


class GetClientTestCase(test.TestCase):

    def test_get_client_from_config(self):
        self.override_config('endpoint', 'http://opensds:50040',
                             group='opensds')
        self.override_config('api_version', 'v1', group='opensds')
        self.override_config('tenant_id', 'tenant', group='opensds')
        self.override_config('api_timeout', 5, group='opensds')

        client = opensds.get_client()

        self.assertEqual('http://opensds:50040/v1/tenant', client.base_url)
        self.assertEqual(5, client.timeout)

    @mock.patch.object(opensds, 'OpenSDSClient')
    def test_get_client_endpoint_override(self, mock_client):
        opensds.get_client('http://other:1')
        self.assertEqual('http://other:1', mock_client.call_args[0][0])
