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

import contextlib
import threading
import time
import weakref

from oslo_concurrency import lockutils
from oslo_log import log as logging

LOG = logging.getLogger(__name__)


class ReaderWriterLocks(object):
    """A garbage collected container of ReaderWriterLock.

    This collection internally uses a weak value dictionary so that when a
    ReaderWriterLock is no longer in use (by any threads) it will
    automatically be removed from this container by the garbage collector.
    """

    def __init__(self):
        self._rwlocks = weakref.WeakValueDictionary()
        self._lock = threading.Lock()

    def get(self, name):
        """Gets (or creates) a ReaderWriterLock with a given name.

        :param name: The ReaderWriterLock name to get/create (used to
                     associate previously created names with the same
                     ReaderWriterLock).

        Returns an newly constructed ReaderWriterLock (or an existing one if
        it was already created for the given name).
        """
        with self._lock:
            try:
                return self._rwlocks[name]
            except KeyError:
                rw_lock = lockutils.ReaderWriterLock()
                self._rwlocks[name] = rw_lock
                return rw_lock

    def __len__(self):
        """Returns how many ReaderWriterLock exist at the current time."""
        return len(self._rwlocks)


_rwlocks = ReaderWriterLocks()


def get_rwlock(name, rwlocks=None):
    if rwlocks is None:
        rwlocks = _rwlocks
    return rwlocks.get(name)


@contextlib.contextmanager
def _timed(name, kind, holder, acquire):
    t1 = time.time()
    t2 = None
    try:
        with acquire():
            t2 = time.time()
            LOG.debug('%(kind)s Lock "%(name)s" acquired by "%(holder)s" :: '
                      'waited %(wait_secs)0.3fs',
                      {'kind': kind, 'name': name, 'holder': holder,
                       'wait_secs': (t2 - t1)})
            yield
    finally:
        t3 = time.time()
        if t2 is None:
            held_secs = "N/A"
        else:
            held_secs = "%0.3fs" % (t3 - t2)

        LOG.debug('%(kind)s Lock "%(name)s" released by "%(holder)s" :: held '
                  '%(held_secs)s',
                  {'kind': kind, 'name': name, 'holder': holder,
                   'held_secs': held_secs})


def read_locked(name, holder, rwlocks=None):
    """Context manager holding the named lock in read (shared) mode.

    Usage::

        with read_locked('mylock', 'lookup'):
            ...

    Any number of threads may hold the same name in read mode at once.
    """
    rwlock = get_rwlock(name, rwlocks=rwlocks)
    return _timed(name, 'Read', holder, rwlock.read_lock)


def write_locked(name, holder, rwlocks=None):
    """Context manager holding the named lock in write (exclusive) mode.

    Usage::

        with write_locked('mylock', 'update'):
            ...

    ensures that only one thread holds the name, excluding readers too.
    """
    rwlock = get_rwlock(name, rwlocks=rwlocks)
    return _timed(name, 'Write', holder, rwlock.write_lock)
