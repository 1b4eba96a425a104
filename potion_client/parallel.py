from concurrent.futures import ThreadPoolExecutor
import logging

log = logging.getLogger(__name__)


def in_parallel(*relations, **kwargs):
    """
    Fetches several relations concurrently and returns their collections in the order given.

    The requests are sent from a thread pool; each relation keeps its result as if it had been fetched on its own.
    An exception raised by any request propagates once every request has completed.

    .. code-block:: python

        users, companies = in_parallel(User.where(admin=1), Company.all())

    :param relations: :class:`Relation` objects
    :param int max_workers: pool size; defaults to the ``POTION_MAX_WORKERS`` configuration value of the first
        relation's :class:`Api`
    :return: a list of :class:`Collection` objects
    """
    max_workers = kwargs.pop('max_workers', None)
    if kwargs:
        raise TypeError('Unexpected keyword arguments: {}'.format(', '.join(kwargs)))
    if not relations:
        return []

    if max_workers is None:
        max_workers = relations[0].resource.api.config['POTION_MAX_WORKERS']

    log.debug('Fetching %d relations with %d workers', len(relations), max_workers)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(relation._request) for relation in relations]

    results = []
    for relation, future in zip(relations, futures):
        envelope, response = future.result()
        results.append(relation.load(envelope, response))
    return results
