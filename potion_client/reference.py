from importlib import import_module
import inspect
import sys


class ResourceReference(object):
    def __init__(self, value):
        self.value = value

    def resolve(self, binding=None):
        """
        Attempt to resolve the reference value and return the matching :class:`Resource`.

        Resource references can be one of the following:

        - :class:`Resource` class
        - a string with a resource name or class name registered with the binding's :class:`Api`
        - a string with the name of a class in the module of the binding
        - a string with a module name and class name of a resource
        - ``"self"`` --- which resolves to the resource this reference is bound to
        """
        name = self.value

        if name == 'self':
            return binding

        from .resource import Resource
        if inspect.isclass(name) and issubclass(name, Resource):
            return name

        api = binding.api if binding is not None else None
        if api is not None:
            for resource in api.resources.values():
                if name in (resource.meta.name, resource.__name__):
                    return resource

        if binding is not None:
            module = sys.modules.get(binding.__module__)
            candidate = getattr(module, name, None)
            if inspect.isclass(candidate) and issubclass(candidate, Resource):
                return candidate

        if name in Resource.registry:
            return Resource.registry[name]

        try:
            if isinstance(name, str):
                module_name, class_name = name.rsplit('.', 1)
                module = import_module(module_name)
                return getattr(module, class_name)
        except (ValueError, ImportError, AttributeError):
            pass

        if api is not None:
            raise RuntimeError('Resource named "{}" is not registered with the Api it is bound to.'.format(name))
        raise RuntimeError('Resource named "{}" cannot be found; the reference is not bound to an Api.'.format(name))

    def __repr__(self):
        return "<ResourceReference '{}'>".format(self.value)


class ResourceBound(object):
    resource = None

    def _on_bind(self, resource):
        pass

    def bind(self, resource):
        if self.resource is None:
            self.resource = resource
            self._on_bind(resource)
        elif self.resource != resource:
            return self.rebind(resource)
        return self

    def rebind(self, resource):
        raise NotImplementedError('{} is already bound to {}'
                                  ' and does not support rebinding to {}'.format(repr(self), self.resource, resource))
