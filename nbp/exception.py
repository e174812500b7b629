# Copyright 2010 United States Government as represented by the
# Administrator of the National Aeronautics and Space Administration.
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

"""nbp base exception handling.

The broker protocol layer maps the ``code`` of these exceptions onto
its wire responses; nothing in here formats a response itself.

"""

from typing import Union

from oslo_log import log as logging

from nbp.i18n import _


LOG = logging.getLogger(__name__)


class NbpException(Exception):
    """Base nbp Exception

    To correctly use this class, inherit from it and define
    a 'message' property. That message will get printf'd
    with the keyword arguments provided to the constructor.

    """
    message = _("An unknown exception occurred.")
    code = 500

    def __init__(self, message: Union[str, tuple] = None, **kwargs):
        self.kwargs = kwargs
        self.kwargs['message'] = message

        if 'code' not in self.kwargs:
            self.kwargs['code'] = self.code

        for k, v in self.kwargs.items():
            if isinstance(v, Exception):
                self.kwargs[k] = str(v)

        if self._should_format():
            try:
                message = self.message % kwargs

            except Exception:
                self._log_exception()
                message = self.message
        elif isinstance(message, Exception):
            message = str(message)

        # NOTE: the actual message lives in 'msg' because 'message' is
        # overshadowed by the class attribute of the same name.
        self.msg = message
        super(NbpException, self).__init__(message)
        self.kwargs.pop('message', None)

    def _log_exception(self) -> None:
        # kwargs doesn't match a variable in the message
        # log the issue and the kwargs
        LOG.exception('Exception in string format operation:')
        for name, value in self.kwargs.items():
            LOG.error("%(name)s: %(value)s",
                      {'name': name, 'value': value})

    def _should_format(self) -> bool:
        return self.kwargs['message'] is None or '%(message)' in self.message

    def __str__(self):
        return str(self.msg)


class NotFound(NbpException):
    message = _("Resource could not be found.")
    code = 404


class Invalid(NbpException):
    message = _("Unacceptable parameters.")
    code = 400


class Conflict(NbpException):
    message = _("Conflict with the current state of the resource.")
    code = 409


class InvalidInput(Invalid):
    message = _("Invalid input received: %(reason)s")


class InstanceNotFound(NotFound):
    message = _("No such instance %(instance_id)s exists.")


class VolumeIdNotProvided(Invalid):
    message = _("Volume id not provided in credential info of instance "
                "%(instance_id)s.")


class AttachmentIdNotProvided(Invalid):
    message = _("Volume attachment id not provided in credential info of "
                "instance %(instance_id)s.")


class InstanceAlreadyExists(Conflict):
    message = _("Service instance %(instance_id)s already exists.")


class InstanceStillBound(Conflict):
    message = _("Service instance %(instance_id)s is still bound by "
                "attachment %(attachment_id)s.")


class NotImplementedYet(NbpException):
    message = _("Operation %(operation)s is not implemented.")
    code = 501


class OpenSDSAPIException(NbpException):
    message = _("Bad or unexpected response from the OpenSDS API: "
                "%(data)s")
