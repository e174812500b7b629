# Copyright 2016 The Kubernetes Authors.
# Copyright 2017 The OpenSDS Authors.
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

"""Service broker controller backed by OpenSDS volumes.

Each service instance is one OpenSDS volume, each binding one volume
attachment. The controller keeps the instances in memory; the mapping
itself is only locked while entries are looked up, added or removed,
and every instance has its own exclusive lock held across the whole of
a create, remove, bind or unbind of that instance, the OpenSDS call
included.
"""

import copy

from oslo_config import cfg
from oslo_log import log as logging

from nbp.brick.initiator import connector
from nbp.broker import api
from nbp.client import opensds
from nbp.common import config  # noqa Need to register broker opts
from nbp import exception
from nbp import readerwriterlockutils

CONF = cfg.CONF
LOG = logging.getLogger(__name__)

INSTANCES_LOCK = 'instances'
BINDING_KEYS = ('attachmentId', 'connectionInfo')


class ServiceInstance(object):
    def __init__(self, name, credentials):
        self.name = name
        self.credentials = credentials

    def __repr__(self):
        return ('<ServiceInstance name=%(name)s credentials=%(creds)s>' %
                {'name': self.name, 'creds': self.credentials})


class OpenSDSController(object):
    """Provision, bind, unbind and deprovision OpenSDS volumes."""

    def __init__(self, endpoint=None, client=None):
        self.endpoint = endpoint or CONF.opensds.endpoint
        self.client = client or opensds.get_client(self.endpoint)
        self._instances = {}
        self._locks = readerwriterlockutils.ReaderWriterLocks()
        # pinned so the weak lock container never drops it
        self._instances_lock = self._locks.get(INSTANCES_LOCK)

    def _instance_locked(self, instance_id, holder):
        return readerwriterlockutils.write_locked(
            'instance-%s' % instance_id, holder, rwlocks=self._locks)

    def _lookup(self, instance_id):
        with readerwriterlockutils.read_locked(INSTANCES_LOCK, 'lookup',
                                               rwlocks=self._locks):
            return self._instances.get(instance_id)

    def _get_instance(self, instance_id):
        instance = self._lookup(instance_id)
        if instance is None:
            raise exception.InstanceNotFound(instance_id=instance_id)
        return instance

    def _get_volume_id(self, instance_id, instance):
        volume_id = instance.credentials.get('volumeId')
        if not volume_id:
            raise exception.VolumeIdNotProvided(instance_id=instance_id)
        return volume_id

    def _get_host_info(self):
        props = connector.get_connector_properties(
            CONF.root_helper, CONF.my_ip,
            initiator_file=CONF.iscsi_initiator_file)
        return {'platform': props['platform'],
                'osType': props['os_type'],
                'ip': props['ip'],
                'host': props['host'],
                'initiator': props.get('initiator', '')}

    def get_credentials(self, instance_id):
        """Return a copy of the credentials of a service instance."""
        return copy.deepcopy(self._get_instance(instance_id).credentials)

    def catalog(self):
        profiles = self.client.list_profiles()

        plans = []
        for prf in profiles:
            plans.append(api.ServicePlan(id=prf.get('id'),
                                         name=prf.get('name'),
                                         description=prf.get('description'),
                                         metadata=prf.get('extras'),
                                         free=True))

        return api.Catalog(services=[
            api.Service(id=CONF.broker.service_id,
                        name=CONF.broker.service_name,
                        description=CONF.broker.service_description,
                        plans=plans,
                        bindable=True)])

    def get_service_instance_last_operation(self, instance_id,
                                            service_id=None, plan_id=None,
                                            operation=None):
        raise exception.NotImplementedYet(operation='last_operation')

    def create_service_instance(self, instance_id, parameters):
        """Create the volume backing a new service instance.

        :param parameters: a validated api.VolumeParameters.
        :raises InstanceAlreadyExists: instance_id is already provisioned.
        """
        with self._instance_locked(instance_id, 'create_service_instance'):
            if self._lookup(instance_id) is not None:
                raise exception.InstanceAlreadyExists(
                    instance_id=instance_id)

            vol = self.client.create_volume(parameters.to_volume_spec())
            instance = ServiceInstance(instance_id, {
                'volumeId': vol['id'],
                'image': 'OPENSDS:%s:%s' % (vol.get('name', ''), vol['id']),
            })

            with readerwriterlockutils.write_locked(
                    INSTANCES_LOCK, 'create_service_instance',
                    rwlocks=self._locks):
                self._instances[instance_id] = instance
            credentials = copy.deepcopy(instance.credentials)

        LOG.info("Created service instance %s.", instance)
        return api.CreateServiceInstanceResponse(credentials)

    def remove_service_instance(self, instance_id, service_id=None,
                                plan_id=None, accepts_incomplete=False):
        """Delete the volume of an unbound service instance."""
        with self._instance_locked(instance_id, 'remove_service_instance'):
            instance = self._get_instance(instance_id)
            volume_id = self._get_volume_id(instance_id, instance)
            attachment_id = instance.credentials.get('attachmentId')
            if attachment_id:
                raise exception.InstanceStillBound(
                    instance_id=instance_id, attachment_id=attachment_id)

            self.client.delete_volume(volume_id)

            with readerwriterlockutils.write_locked(
                    INSTANCES_LOCK, 'remove_service_instance',
                    rwlocks=self._locks):
                del self._instances[instance_id]

        LOG.info("Removed service instance %(id)s (volume %(vol)s).",
                 {'id': instance_id, 'vol': volume_id})

    def bind(self, instance_id, binding_id, parameters):
        """Attach the volume of a service instance.

        :param parameters: a validated api.BindingParameters.
        :returns: CreateServiceBindingResponse carrying the credentials
                  augmented with the attachment id and connection info.
        """
        with self._instance_locked(instance_id, 'bind'):
            instance = self._get_instance(instance_id)
            volume_id = self._get_volume_id(instance_id, instance)
            attachment_id = instance.credentials.get('attachmentId')
            if attachment_id:
                raise exception.InstanceStillBound(
                    instance_id=instance_id, attachment_id=attachment_id)

            spec = {'volumeId': volume_id,
                    'hostInfo': self._get_host_info(),
                    'metadata': parameters.to_metadata()}
            atc = self.client.create_volume_attachment(spec)

            instance.credentials['attachmentId'] = atc['id']
            instance.credentials['connectionInfo'] = atc.get(
                'connectionInfo', {})
            credentials = copy.deepcopy(instance.credentials)

        LOG.info("Bound service instance %(id)s as %(binding)s with "
                 "attachment %(atc)s.",
                 {'id': instance_id, 'binding': binding_id,
                  'atc': atc['id']})
        return api.CreateServiceBindingResponse(credentials)

    def unbind(self, instance_id, binding_id, service_id=None,
               plan_id=None):
        """Detach the volume of a service instance, keeping the volume."""
        with self._instance_locked(instance_id, 'unbind'):
            instance = self._get_instance(instance_id)
            attachment_id = instance.credentials.get('attachmentId')
            if not attachment_id:
                raise exception.AttachmentIdNotProvided(
                    instance_id=instance_id)

            self.client.delete_volume_attachment(attachment_id)

            for key in BINDING_KEYS:
                instance.credentials.pop(key, None)

        LOG.info("Unbound %(binding)s from service instance %(id)s.",
                 {'binding': binding_id, 'id': instance_id})
