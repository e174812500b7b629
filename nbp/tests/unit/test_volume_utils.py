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

"""Tests for the node side attach and detach helpers."""

from unittest import mock

from nbp.brick.initiator import connector
from nbp.brick.local_dev import filesystem
from nbp import test
from nbp import volume_utils

CONNECTION_INFO = {
    'targetDiscovered': True,
    'targetIqn': 'iqn.2017-01.demo:vol1',
    'targetPortal': '10.0.0.1:3260',
    'targetLun': 1,
    'volumeId': 'vol-1',
}
DEVICE = ('/dev/disk/by-path/ip-10.0.0.1:3260-iscsi-iqn.2017-01.demo:vol1'
          '-lun-1')


class VolumeUtilsTestCase(test.TestCase):

    def setUp(self):
        super(VolumeUtilsTestCase, self).setUp()
        self.mock_connector = self.mock_object(connector, 'ISCSIConnector')
        self.mock_fs = self.mock_object(filesystem, 'LinuxFilesystem')
        self.conn = self.mock_connector.return_value
        self.fs = self.mock_fs.return_value
        self.conn.connect_volume.return_value = DEVICE

    def test_brick_get_connector_uses_config(self):
        self.flags(root_helper='sudo nbp-rootwrap',
                   iscsi_device_scan_attempts=3,
                   iscsi_device_scan_interval=0,
                   iscsi_initiator_file='/tmp/initiatorname')

        volume_utils.brick_get_connector()

        self.mock_connector.assert_called_once_with(
            'sudo nbp-rootwrap', device_scan_attempts=3,
            device_scan_interval=0, transport='tcp',
            initiator_file='/tmp/initiatorname')

    def test_brick_get_filesystem_uses_config(self):
        self.flags(default_fs_type='xfs')
        volume_utils.brick_get_filesystem()
        self.mock_fs.assert_called_once_with('sudo', default_fs_type='xfs')

    def test_attach_volume(self):
        device = volume_utils.attach_volume(CONNECTION_INFO, '/mnt/vol1',
                                            fs_type='ext4')

        self.assertEqual(DEVICE, device)
        props = self.conn.connect_volume.call_args[0][0]
        self.assertEqual('10.0.0.1:3260', props.target_portal)
        self.assertEqual('iqn.2017-01.demo:vol1', props.target_iqn)
        self.assertEqual(1, props.target_lun)
        self.fs.format_and_mount.assert_called_once_with(DEVICE, 'ext4',
                                                         '/mnt/vol1')

    def test_attach_volume_connect_failure_skips_mount(self):
        self.conn.connect_volume.side_effect = test.TestingException
        self.assertRaises(test.TestingException, volume_utils.attach_volume,
                          CONNECTION_INFO, '/mnt/vol1')
        self.fs.format_and_mount.assert_not_called()

    def test_detach_volume(self):
        manager = mock.Mock()
        manager.attach_mock(self.fs.umount, 'umount')
        manager.attach_mock(self.conn.disconnect_volume, 'disconnect_volume')

        volume_utils.detach_volume(CONNECTION_INFO, '/mnt/vol1')

        self.assertEqual(
            [mock.call.umount('/mnt/vol1'),
             mock.call.disconnect_volume('10.0.0.1:3260',
                                         'iqn.2017-01.demo:vol1')],
            manager.mock_calls)
