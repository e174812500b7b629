# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or
# implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import itertools

from nbp.common import config as nbp_common_config


def list_opts():
    return [
        ('DEFAULT',
            itertools.chain(
                nbp_common_config.global_opts,
                nbp_common_config.initiator_opts,
            )),
        ('opensds',
            itertools.chain(
                nbp_common_config.opensds_opts,
            )),
        ('broker',
            itertools.chain(
                nbp_common_config.broker_opts,
            )),
    ]
