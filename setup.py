# Copyright 2010 United States Government as represented by the
# Administrator of the National Aeronautics and Space Administration.
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

import setuptools

project = 'nbp'

requires = [
    'oslo.concurrency>=4.0.0',
    'oslo.config>=8.0.0',
    'oslo.i18n>=5.0.0',
    'oslo.log>=4.0.0',
    'oslo.utils>=4.0.0',
    'requests>=2.23.0',
    'tenacity>=6.0.0',
]

test_requires = [
    'ddt>=1.4.0',
    'fixtures>=3.0.0',
    'stestr>=3.0.0',
    'testtools>=2.4.0',
]

setuptools.setup(
    name=project,
    version='0.1.0',
    description='OpenSDS northbound plugin: iSCSI attach and service broker',
    author='OpenSDS',
    url='https://github.com/opensds/nbp',
    classifiers=[
        'Intended Audience :: Information Technology',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ],
    python_requires='>=3.8',
    packages=setuptools.find_packages(include=['nbp', 'nbp.*']),
    install_requires=requires,
    extras_require={'test': test_requires},
    entry_points={
        'oslo.config.opts': [
            'nbp = nbp.opts:list_opts',
        ],
    },
    include_package_data=True,
    py_modules=[])
