from . import signals

HOOK_NAMES = (
    'before_save', 'after_save',
    'before_create', 'after_create',
    'before_update', 'after_update',
    'before_destroy', 'after_destroy',
    'after_find',
    'after_initialize'
)


class HookSet(object):
    """
    Ordered lists of hooks keyed by hook name, such as ``before_save``.

    A hook is either the name of a resource method or a callable receiving the resource. Hooks run in the order they
    were added; exceptions raised by a hook propagate. Every hook point also sends the signal of the same name from
    :mod:`potion_client.signals` with the resource class as sender.
    """

    def __init__(self, hooks=None):
        self._hooks = {name: list(hooks.get(name, ())) if hooks else [] for name in HOOK_NAMES}

    def copy(self):
        return HookSet(self._hooks)

    def add(self, name, hook):
        if name not in self._hooks:
            raise ValueError('Unknown hook "{}"; expected one of {}'.format(name, ', '.join(HOOK_NAMES)))
        self._hooks[name].append(hook)

    def get(self, name):
        return tuple(self._hooks[name])

    def run(self, name, resource):
        for hook in self._hooks[name]:
            if isinstance(hook, str):
                getattr(resource, hook)()
            else:
                hook(resource)
        getattr(signals, name).send(resource.__class__, item=resource)

    def run_before(self, resource, *events):
        for event in events:
            name = 'before_{}'.format(event)
            if name in self._hooks:
                self.run(name, resource)

    def run_after(self, resource, *events):
        for event in reversed(events):
            self.run('after_{}'.format(event), resource)


def _hook(name):
    def decorator(fn):
        fn.__dict__.setdefault('__potion_hooks__', []).append(name)
        return fn
    decorator.__name__ = name
    return decorator


before_save = _hook('before_save')
after_save = _hook('after_save')
before_create = _hook('before_create')
after_create = _hook('after_create')
before_update = _hook('before_update')
after_update = _hook('after_update')
before_destroy = _hook('before_destroy')
after_destroy = _hook('after_destroy')
after_find = _hook('after_find')
after_initialize = _hook('after_initialize')
