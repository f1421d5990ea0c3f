import logging


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    while not condition(instance):
        instance = instance.father

    return instance


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.BytesField(Dependency('.length'))

    and have the (internal) length of the field named 'data' strictly
    connected to the field named 'length'.

    The relation is defined in the unpacking direction (the length is read
    and then used) and it's reversed during the packing: the field holding
    the dependency writes back the actual value with resolve_and_set().

    The syntax for the expression is inspired from the relative imports of
    python modules: each leading '.' moves one level up starting from the
    field itself, so '.length' is a sibling and '..tag' is a sibling of the
    father; an expression without leading dots is resolved from the root.
    '''
    def __init__(self, expression):
        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def _split(self):
        level = len(self.expression) - len(self.expression.lstrip('.'))
        components = [_ for _ in self.expression[level:].split('.') if _]

        return level, components

    def resolve_field(self, instance):
        level, components = self._split()

        if level == 0:
            field = get_root_from_chunk(instance)
        else:
            field = instance
            for _ in range(level):
                field = field.father
                if field is None:
                    raise AttributeError(f'dependency {self.expression} goes beyond the root starting from {instance!r}')

        for component_name in components:
            field = getattr(field, component_name)

        self.logger.debug('resolved \'%s\' as %s', self.expression, field.__class__.__name__)

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        return self.resolve_field(instance).value

    def resolve_and_set(self, instance, value):
        self.resolve_field(instance).value = value
