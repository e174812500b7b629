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

"""Values exchanged between the broker protocol layer and the controller.

The protocol layer decodes a request body into one of the parameter
classes below (which validate what they are given) and turns the
responses back into JSON with their ``to_dict`` methods.
"""

from nbp import exception
from nbp.i18n import _


def _get_str(params, key):
    value = params.get(key)
    if value is not None and not isinstance(value, str):
        raise exception.InvalidInput(
            reason=_("%(key)s must be a string, got %(value)r") %
            {'key': key, 'value': value})
    return value


class ServicePlan(object):
    def __init__(self, id, name, description, metadata=None, free=True):
        self.id = id
        self.name = name
        self.description = description
        self.metadata = metadata or {}
        self.free = free

    def to_dict(self):
        return {'id': self.id,
                'name': self.name,
                'description': self.description,
                'metadata': self.metadata,
                'free': self.free}


class Service(object):
    def __init__(self, id, name, description, plans, bindable=True):
        self.id = id
        self.name = name
        self.description = description
        self.plans = plans
        self.bindable = bindable

    def to_dict(self):
        return {'id': self.id,
                'name': self.name,
                'description': self.description,
                'bindable': self.bindable,
                'plans': [plan.to_dict() for plan in self.plans]}


class Catalog(object):
    def __init__(self, services):
        self.services = services

    def to_dict(self):
        return {'services': [service.to_dict()
                             for service in self.services]}


class VolumeParameters(object):
    """Parameters of a service instance provisioning request."""

    def __init__(self, name='', description='', capacity=0, lv_path=None):
        self.name = name
        self.description = description
        self.capacity = capacity
        self.lv_path = lv_path

    @classmethod
    def from_dict(cls, params):
        """Validate the ``parameters`` object of a provisioning request.

        Recognized keys are name, description, capacity (GB) and lvPath,
        anything else is ignored.

        :raises InvalidInput: when a recognized key has the wrong type.
        """
        params = params or {}
        capacity = params.get('capacity', 0)
        if (isinstance(capacity, bool) or not isinstance(capacity, int) or
                capacity < 0):
            raise exception.InvalidInput(
                reason=_("capacity must be a non-negative integer, got "
                         "%r") % capacity)
        return cls(name=_get_str(params, 'name') or '',
                   description=_get_str(params, 'description') or '',
                   capacity=capacity,
                   lv_path=_get_str(params, 'lvPath'))

    def to_volume_spec(self):
        spec = {'name': self.name,
                'description': self.description,
                'size': self.capacity,
                'metadata': {}}
        if self.lv_path:
            spec['metadata']['lvPath'] = self.lv_path
        return spec


class BindingParameters(object):
    """Parameters of a service binding request."""

    def __init__(self, lv_path=None):
        self.lv_path = lv_path

    @classmethod
    def from_dict(cls, params):
        return cls(lv_path=_get_str(params or {}, 'lvPath'))

    def to_metadata(self):
        if self.lv_path:
            return {'lvPath': self.lv_path}
        return {}


class CreateServiceInstanceResponse(object):
    def __init__(self, credentials):
        self.credentials = credentials

    def to_dict(self):
        return {}


class CreateServiceBindingResponse(object):
    def __init__(self, credentials):
        self.credentials = credentials

    def to_dict(self):
        return {'credentials': self.credentials}
