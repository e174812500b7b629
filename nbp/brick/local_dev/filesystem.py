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

"""Local filesystem helpers for attached block devices."""

from oslo_concurrency import processutils as putils
from oslo_log import log as logging

from nbp.brick import executor

LOG = logging.getLogger(__name__)

DEFAULT_FS_TYPE = 'ext4'


class LinuxFilesystem(executor.Executor):
    """Format and mount block devices on the local host."""

    def __init__(self, root_helper, execute=putils.execute,
                 default_fs_type=DEFAULT_FS_TYPE, *args, **kwargs):
        super(LinuxFilesystem, self).__init__(root_helper, execute=execute,
                                              *args, **kwargs)
        self.default_fs_type = default_fs_type

    def get_fs_type(self, device):
        """Return the signature type found on device, '' if there is none.

        A filesystem type wins over a partition table type, so a
        partitioned disk reports e.g. 'dos' or 'gpt'. blkid exits with 2
        when it finds no signature at all, any failure to probe is
        reported the same way.
        """
        try:
            (out, _err) = self._run_as_root('blkid', device)
        except putils.ProcessExecutionError as exc:
            LOG.debug("Failed to get the filesystem type of %(device)s: "
                      "%(exc)s", {'device': device, 'exc': exc})
            return ''

        fs_type = ''
        pt_type = ''
        for token in out.split():
            if token.startswith('TYPE='):
                fs_type = token.split('=', 1)[1].strip('"')
            elif token.startswith('PTTYPE='):
                pt_type = token.split('=', 1)[1].strip('"')
        return fs_type or pt_type

    def format(self, device, fs_type=None):
        """Create a filesystem on device unless it already carries one.

        A device holding only a partition table is left alone too.
        """
        current = self.get_fs_type(device)
        if current:
            LOG.info("Device %(device)s already carries a %(fs_type)s "
                     "signature, not formatting.",
                     {'device': device, 'fs_type': current})
            return

        fs_type = fs_type or self.default_fs_type
        LOG.info("Formatting device %(device)s with %(fs_type)s.",
                 {'device': device, 'fs_type': fs_type})
        self._run_as_root('mkfs', '-t', fs_type, '-F', device)

    def mount(self, device, mount_point):
        try:
            self._run_as_root('mkdir', '-p', mount_point)
        except putils.ProcessExecutionError as exc:
            LOG.warning("Failed to create mount point %(mp)s: %(exc)s",
                        {'mp': mount_point, 'exc': exc})

        self._run_as_root('mount', device, mount_point)

    def format_and_mount(self, device, fs_type, mount_point):
        self.format(device, fs_type)
        self.mount(device, mount_point)

    def umount(self, mount_point):
        self._run_as_root('umount', mount_point)
