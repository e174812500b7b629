# Copyright 2013 OpenStack Foundation.
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

import collections
import errno
import glob
import os
import platform
import socket
import sys

from oslo_concurrency import lockutils
from oslo_concurrency import processutils as putils
from oslo_log import log as logging
from oslo_utils import strutils
import tenacity

from nbp.brick import exception
from nbp.brick import executor
from nbp.i18n import _

LOG = logging.getLogger(__name__)

synchronized = lockutils.synchronized_with_prefix('nbp-')

ISCSI_TRANSPORT_TCP = 'tcp'
DEVICE_SCAN_ATTEMPTS_DEFAULT = 10
DEVICE_SCAN_INTERVAL_DEFAULT = 1
INITIATOR_FILE = '/etc/iscsi/initiatorname.iscsi'


def get_connector_properties(root_helper, my_ip, execute=putils.execute,
                             initiator_file=INITIATOR_FILE):
    """Get the properties identifying this host to the storage backend.

    The result is sent along with a volume attachment request so the
    backend knows which initiator to export the volume to.
    """

    iscsi = ISCSIConnector(root_helper=root_helper, execute=execute,
                           initiator_file=initiator_file)

    props = {}
    props['ip'] = my_ip
    props['host'] = socket.gethostname()
    initiator = iscsi.get_initiator()
    if initiator:
        props['initiator'] = initiator
    props['platform'] = platform.machine()
    props['os_type'] = sys.platform
    return props


_PROPERTY_KEYS = collections.OrderedDict([
    ('access_mode', ('accessMode', 'access_mode')),
    ('auth_method', ('authMethod', 'auth_method')),
    ('auth_username', ('authUserName', 'auth_username')),
    ('auth_password', ('authPassword', 'auth_password')),
    ('target_discovered', ('targetDiscovered', 'target_discovered')),
    ('target_iqn', ('targetIqn', 'target_iqn')),
    ('target_portal', ('targetPortal', 'target_portal')),
    ('target_lun', ('targetLun', 'target_lun')),
    ('volume_id', ('volumeId', 'volume_id')),
    ('encrypted', ('encrypted',)),
])


class ConnectionProperties(collections.namedtuple('ConnectionProperties',
                                                  list(_PROPERTY_KEYS))):
    """What is needed to reach one LUN of an iSCSI target.

    Instances are immutable; build them with :meth:`from_dict` from the
    ``connectionInfo`` mapping returned by a volume attachment.
    """
    __slots__ = ()

    @classmethod
    def from_dict(cls, connection_info):
        """Build connection properties from an attachment mapping.

        Both the camelCase keys used by the OpenSDS API and their
        snake_case equivalents are understood. Missing keys take the
        zero value of their field.
        """
        values = {}
        for field, keys in _PROPERTY_KEYS.items():
            values[field] = next((connection_info[k] for k in keys
                                  if connection_info.get(k) is not None),
                                 None)

        lun = values['target_lun'] or 0
        if isinstance(lun, float) and lun.is_integer():
            lun = int(lun)
        if isinstance(lun, (bool, float)):
            raise exception.InvalidParameterValue(
                err=_('Invalid target LUN %s') % values['target_lun'])
        try:
            lun = int(lun)
        except (TypeError, ValueError):
            raise exception.InvalidParameterValue(
                err=_('Invalid target LUN %s') % values['target_lun'])

        return cls(
            access_mode=values['access_mode'] or '',
            auth_method=values['auth_method'] or '',
            auth_username=values['auth_username'] or '',
            auth_password=values['auth_password'] or '',
            target_discovered=strutils.bool_from_string(
                values['target_discovered']),
            target_iqn=values['target_iqn'] or '',
            target_portal=values['target_portal'] or '',
            target_lun=lun,
            volume_id=values['volume_id'] or '',
            encrypted=strutils.bool_from_string(values['encrypted']))


def _probe_path(device_path, transport):
    if transport == ISCSI_TRANSPORT_TCP:
        os.stat(device_path)
        return device_path

    # Several PCI devices may present the same target, only the first
    # match is used.
    matches = sorted(glob.glob(device_path))
    if not matches:
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT),
                                device_path)
    return matches[0]


def wait_for_path(device_path, max_attempts,
                  transport=ISCSI_TRANSPORT_TCP,
                  interval=DEVICE_SCAN_INTERVAL_DEFAULT):
    """Wait for a device node to show up.

    :param device_path: path of the node, or a glob pattern when the
                        transport is not tcp.
    :param max_attempts: number of looks before giving up, at least 1.
    :param transport: iSCSI interface transport.
    :param interval: seconds between two looks.
    :returns: the resolved device path, or None if it never appeared or
              could not be looked at.
    """
    if max_attempts < 1:
        LOG.debug("Not looking for %(path)s, %(attempts)s attempts "
                  "requested.",
                  {'path': device_path, 'attempts': max_attempts})
        return None

    retrying = tenacity.Retrying(
        sleep=tenacity.nap.sleep,
        stop=tenacity.stop_after_attempt(max_attempts),
        wait=tenacity.wait_fixed(interval),
        retry=tenacity.retry_if_exception_type(FileNotFoundError),
        before_sleep=tenacity.before_sleep_log(LOG, logging.DEBUG),
        reraise=True)
    try:
        return retrying(_probe_path, device_path, transport)
    except OSError as exc:
        LOG.debug("Device path %(path)s not available: %(exc)s",
                  {'path': device_path, 'exc': exc})
        return None


class ISCSIConnector(executor.Executor):
    """Connector class to attach/detach iSCSI volumes."""

    def __init__(self, root_helper, execute=putils.execute,
                 device_scan_attempts=DEVICE_SCAN_ATTEMPTS_DEFAULT,
                 device_scan_interval=DEVICE_SCAN_INTERVAL_DEFAULT,
                 transport=ISCSI_TRANSPORT_TCP,
                 initiator_file=INITIATOR_FILE,
                 *args, **kwargs):
        super(ISCSIConnector, self).__init__(root_helper, execute=execute,
                                             *args, **kwargs)
        self.device_scan_attempts = device_scan_attempts
        self.device_scan_interval = device_scan_interval
        self.transport = transport
        self.initiator_file = initiator_file

    def get_device_path(self, connection_properties):
        """Path of the device node the target LUN shows up as."""
        path = ("ip-%(portal)s-iscsi-%(iqn)s-lun-%(lun)s" %
                {'portal': connection_properties.target_portal,
                 'iqn': connection_properties.target_iqn,
                 'lun': connection_properties.target_lun})
        if self.transport != ISCSI_TRANSPORT_TCP:
            path = "pci-*-" + path
        return "/dev/disk/by-path/" + path

    @synchronized('connect_volume')
    def connect_volume(self, connection_properties):
        """Log into the target and return the local device path.

        Nothing is run when the device node is already there. Otherwise
        the portal is discovered, credentials are set when an auth method
        is given, the target is logged into and the device node is waited
        for. A session logged into before a timeout is left in place,
        call disconnect_volume to clean it up.

        :raises VolumeDeviceNotFound: the node did not show up in time.
        :raises ProcessExecutionError: an iscsiadm command failed.
        """
        portal = connection_properties.target_portal
        iqn = connection_properties.target_iqn
        device_path = self.get_device_path(connection_properties)
        LOG.debug("Connect portal: %(portal)s targetiqn: %(iqn)s "
                  "targetlun: %(lun)s",
                  {'portal': portal, 'iqn': iqn,
                   'lun': connection_properties.target_lun})

        host_device = wait_for_path(device_path, 1, self.transport,
                                    self.device_scan_interval)
        if host_device:
            LOG.debug("Found iSCSI node %s already present.", host_device)
            return host_device

        self.discover(portal)
        if connection_properties.auth_method:
            self.set_auth(portal, iqn,
                          connection_properties.auth_username,
                          connection_properties.auth_password)
        self.login(portal, iqn)

        host_device = wait_for_path(device_path, self.device_scan_attempts,
                                    self.transport,
                                    self.device_scan_interval)
        if not host_device:
            raise exception.VolumeDeviceNotFound(
                device=device_path, attempts=self.device_scan_attempts)

        LOG.debug("Found iSCSI node %s after login.", host_device)
        return host_device

    @synchronized('connect_volume')
    def disconnect_volume(self, target_portal, target_iqn):
        """Log out of the target and forget its node record."""
        LOG.debug("Disconnect portal: %(portal)s targetiqn: %(iqn)s",
                  {'portal': target_portal, 'iqn': target_iqn})
        self.logout(target_portal, target_iqn)
        self.delete_node(target_iqn)

    def discover(self, portal):
        return self._run_iscsiadm_bare(('-m', 'discovery', '-t',
                                        'sendtargets', '-p', portal))

    def set_auth(self, portal, target_iqn, username, password):
        self._iscsiadm_update(portal, target_iqn,
                              'node.session.auth.username', username)
        self._iscsiadm_update(portal, target_iqn,
                              'node.session.auth.password', password)

    def login(self, portal, target_iqn):
        return self._run_iscsiadm(portal, target_iqn, ('--login',))

    def logout(self, portal, target_iqn):
        return self._run_iscsiadm(portal, target_iqn, ('--logout',))

    def delete_node(self, target_iqn):
        return self._run_iscsiadm_bare(('-m', 'node', '-o', 'delete',
                                        '-T', target_iqn))

    def get_initiator(self):
        """Secure helper to read file as root."""
        try:
            lines, _err = self._execute('cat', self.initiator_file,
                                        run_as_root=True,
                                        root_helper=self._root_helper)
        except putils.ProcessExecutionError:
            LOG.warning("Could not find the iSCSI Initiator File %s",
                        self.initiator_file)
            return None

        for line in lines.split('\n'):
            if line.startswith('InitiatorName='):
                return line[line.index('=') + 1:].strip()
        return None

    def _run_iscsiadm(self, portal, target_iqn, iscsi_command):
        return self._run_iscsiadm_bare(('-m', 'node', '-p', portal,
                                        '-T', target_iqn) +
                                       tuple(iscsi_command))

    def _iscsiadm_update(self, portal, target_iqn, property_key,
                         property_value):
        iscsi_command = ('--op=update', '--name', property_key,
                         '--value', property_value)
        return self._run_iscsiadm(portal, target_iqn, iscsi_command)

    def _run_iscsiadm_bare(self, iscsi_command):
        return self._run_as_root('iscsiadm', *iscsi_command)
