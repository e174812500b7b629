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

"""Node side volume attach workflow.

Ties the iSCSI connector and the local filesystem helper together the
way a node plugin publishes and unpublishes a volume.
"""

from oslo_config import cfg
from oslo_log import log as logging

from nbp.brick.initiator import connector
from nbp.brick.local_dev import filesystem
from nbp.common import config  # noqa Need to register global_opts

CONF = cfg.CONF
LOG = logging.getLogger(__name__)


def brick_get_connector(transport=connector.ISCSI_TRANSPORT_TCP):
    """Wrapper to get a brick connector object.

    This automatically populates the root_helper and scan settings
    from the configuration.
    """
    return connector.ISCSIConnector(
        CONF.root_helper,
        device_scan_attempts=CONF.iscsi_device_scan_attempts,
        device_scan_interval=CONF.iscsi_device_scan_interval,
        transport=transport,
        initiator_file=CONF.iscsi_initiator_file)


def brick_get_filesystem():
    return filesystem.LinuxFilesystem(
        CONF.root_helper, default_fs_type=CONF.default_fs_type)


def attach_volume(connection_info, mount_point, fs_type=None):
    """Connect a volume, format it if needed and mount it.

    :param connection_info: ``connectionInfo`` of a volume attachment.
    :returns: the local device path.
    """
    props = connector.ConnectionProperties.from_dict(connection_info)
    device = brick_get_connector().connect_volume(props)
    brick_get_filesystem().format_and_mount(device, fs_type, mount_point)
    LOG.info("Volume %(volume)s attached at %(device)s and mounted on "
             "%(mp)s.", {'volume': props.volume_id, 'device': device,
                         'mp': mount_point})
    return device


def detach_volume(connection_info, mount_point):
    """Unmount a volume and log out of its target."""
    props = connector.ConnectionProperties.from_dict(connection_info)
    brick_get_filesystem().umount(mount_point)
    brick_get_connector().disconnect_volume(props.target_portal,
                                            props.target_iqn)
    LOG.info("Volume %(volume)s detached from %(mp)s.",
             {'volume': props.volume_id, 'mp': mount_point})
