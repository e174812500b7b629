# Copyright 2010 United States Government as represented by the
# Administrator of the National Aeronautics and Space Administration.
# All Rights Reserved.
# Copyright 2012 Red Hat, Inc.
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

"""Global configuration options for the broker and the node helpers."""

import socket

from oslo_config import cfg
from oslo_log import log as logging
from oslo_utils import netutils


CONF = cfg.CONF
logging.register_options(CONF)

global_opts = [
    cfg.HostAddressOpt('my_ip',
                       sample_default='<HOST_IP_ADDRESS>',
                       default=netutils.get_my_ipv4(),
                       help='IP address of this host'),
    cfg.HostAddressOpt('host',
                       sample_default='localhost',
                       default=socket.gethostname(),
                       help='Name of this node.  This can be an opaque '
                            'identifier. It is not necessarily a host name, '
                            'FQDN, or IP address.'),
    cfg.StrOpt('root_helper',
               default='sudo',
               help='Command prefix used to run host commands as root.'),
]

initiator_opts = [
    cfg.StrOpt('iscsi_initiator_file',
               default='/etc/iscsi/initiatorname.iscsi',
               help='File holding the InitiatorName of the local iSCSI '
                    'initiator.'),
    cfg.IntOpt('iscsi_device_scan_attempts',
               default=10,
               min=1,
               help='Number of times to look for the device node of a '
                    'freshly logged in iSCSI target.'),
    cfg.IntOpt('iscsi_device_scan_interval',
               default=1,
               min=0,
               help='Seconds to wait between two looks for the device '
                    'node of an iSCSI target.'),
    cfg.StrOpt('default_fs_type',
               default='ext4',
               help='Filesystem created on a volume that carries no '
                    'filesystem signature yet.'),
]

opensds_opts = [
    cfg.URIOpt('endpoint',
               default='http://127.0.0.1:50040',
               help='Endpoint of the OpenSDS controller API.'),
    cfg.StrOpt('api_version',
               default='v1beta',
               help='OpenSDS API version used in request paths.'),
    cfg.StrOpt('tenant_id',
               default='adminTenantId',
               help='Tenant the broker acts on behalf of.'),
    cfg.IntOpt('api_timeout',
               default=60,
               min=1,
               help='Timeout in seconds for OpenSDS API calls.'),
]

broker_opts = [
    cfg.StrOpt('service_name',
               default='opensds-service',
               help='Name of the service offered in the broker catalog.'),
    cfg.StrOpt('service_id',
               default='4f6e6cf6-ffdd-425f-a2c7-3c9258ad2468',
               help='Identifier of the service offered in the broker '
                    'catalog.'),
    cfg.StrOpt('service_description',
               default='Policy based storage service',
               help='Description of the service offered in the broker '
                    'catalog.'),
]

CONF.register_opts(global_opts)
CONF.register_opts(initiator_opts)
CONF.register_opts(opensds_opts, group='opensds')
CONF.register_opts(broker_opts, group='broker')
