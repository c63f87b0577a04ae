"""
Array and hash literals, indexing and assignment.

Arrays and hashes are reference values: index assignment mutates the
container in place and every alias observes the change. Assignment to a
name rebinds it in the scope that declared it.
"""

from __future__ import annotations

from mutant.evaluators.classes import ClassMixin
from mutant.evaluators.operators import OperatorMixin
from mutant.mutant_ast import (
    ArrayLiteral,
    AssignmentExpression,
    ASTNode,
    HashLiteral,
    Identifier,
    IndexExpression,
    PropertyExpression,
)
from mutant.mutant_environment import Environment
from mutant.mutant_errors import (
    ErrorKind,
    assign_to_constant,
    identifier_not_found,
    index_not_supported,
    index_out_of_bounds,
    invalid_assignment_target,
    unusable_hash_key,
)
from mutant.mutant_objects import (
    NULL,
    ArrayObject,
    Hashable,
    HashObject,
    IntegerObject,
    MutantObject,
    StringObject,
    is_signal,
)


class CollectionMixin(ClassMixin, OperatorMixin):
    """Array and hash literals, indexing, and every form of assignment.

    Arrays and hashes are reference values: index writes mutate the shared
    container and are visible through every alias.
    """

    def eval_array(self, node: ArrayLiteral, env: Environment) -> MutantObject:
        elements = self.eval_arguments(node.elements, env)
        if isinstance(elements, MutantObject):
            return elements
        return ArrayObject(elements)

    def eval_hash(self, node: HashLiteral, env: Environment) -> MutantObject:
        """Builds a hash, evaluating each key before its value, in source order.

        Returns:
            The hash, or a TypeError for a key that is not an integer,
            string or boolean.
        """
        result = HashObject()
        for key_node, value_node in node.pairs:
            key = self.visit(key_node, env)
            if is_signal(key):
                return key
            if not isinstance(key, Hashable):
                return self.error(unusable_hash_key(key.type_name), key_node, ErrorKind.TYPE)
            value = self.visit(value_node, env)
            if is_signal(value):
                return value
            result.set(key, value)
        return result

    def eval_index(self, node: IndexExpression, env: Environment) -> MutantObject:
        left = self.visit(node.left, env)
        if is_signal(left):
            return left
        index = self.visit(node.index, env)
        if is_signal(index):
            return index
        return self.get_index(left, index, node)

    def get_index(self, left: MutantObject, index: MutantObject, node: ASTNode) -> MutantObject:
        """Reads `left[index]`.

        Args:
            left: ARRAY, HASH or STRING being indexed.
            index: INTEGER for arrays and strings, any hashable for hashes.
            node: Node that errors are positioned at.

        Returns:
            The element; NULL for a missing hash key; an IndexError for an
            out-of-range position (negative indices are never wrapped).
        """
        if isinstance(left, ArrayObject) and isinstance(index, IntegerObject):
            i = index.value
            if i < 0 or i >= len(left.elements):
                return self.error(index_out_of_bounds(i, len(left.elements)), node, ErrorKind.INDEX)
            return left.elements[i]
        if isinstance(left, HashObject):
            if not isinstance(index, Hashable):
                return self.error(unusable_hash_key(index.type_name), node, ErrorKind.TYPE)
            value = left.get(index)
            return value if value is not None else NULL
        if isinstance(left, StringObject) and isinstance(index, IntegerObject):
            i = index.value
            if i < 0 or i >= len(left.value):
                return self.error(index_out_of_bounds(i, len(left.value)), node, ErrorKind.INDEX)
            return StringObject(left.value[i])
        return self.error(index_not_supported(left.type_name, index.type_name), node, ErrorKind.TYPE)

    def set_index(
        self, left: MutantObject, index: MutantObject, value: MutantObject, node: ASTNode
    ) -> MutantObject:
        """Writes `left[index] = value` in place; arrays never grow this way."""
        if isinstance(left, ArrayObject) and isinstance(index, IntegerObject):
            i = index.value
            if i < 0 or i >= len(left.elements):
                return self.error(index_out_of_bounds(i, len(left.elements)), node, ErrorKind.INDEX)
            left.elements[i] = value
            return value
        if isinstance(left, HashObject):
            if not isinstance(index, Hashable):
                return self.error(unusable_hash_key(index.type_name), node, ErrorKind.TYPE)
            left.set(index, value)
            return value
        return self.error(
            f"Index assignment not supported: {left.type_name}[{index.type_name}]", node, ErrorKind.TYPE
        )

    def eval_assign(self, node: AssignmentExpression, env: Environment) -> MutantObject:
        """Dispatches on the target: a name, an index or a property."""
        target = node.target
        if isinstance(target, Identifier):
            return self.assign_name(target, node, env)
        if isinstance(target, IndexExpression):
            return self.assign_index(target, node, env)
        if isinstance(target, PropertyExpression):
            return self.assign_property(target, node, env)
        return self.error(invalid_assignment_target(target.kind), node, ErrorKind.TYPE)

    def combine(
        self, node: AssignmentExpression, current: MutantObject, env: Environment
    ) -> MutantObject:
        """Evaluates the right-hand side, folding it into `current` for `op=` forms."""
        value = self.visit(node.value, env)
        if is_signal(value) or node.operator == "=":
            return value
        return self.apply_infix(node.operator[:-1], current, value, node)

    def assign_name(self, target: Identifier, node: AssignmentExpression, env: Environment) -> MutantObject:
        """Rebinds a declared name; `op=` forms read the current value first."""
        name = target.name
        current = env.get(name)
        if current is None:
            return self.error(identifier_not_found(name), target, ErrorKind.NAME)
        if env.is_constant(name):
            return self.error(assign_to_constant(name), node, ErrorKind.NAME)
        value = self.combine(node, current, env)
        if is_signal(value):
            return value
        env.assign(name, value)
        return value

    def assign_index(
        self, target: IndexExpression, node: AssignmentExpression, env: Environment
    ) -> MutantObject:
        """Container and index are evaluated once, even for `op=` forms."""
        container = self.visit(target.left, env)
        if is_signal(container):
            return container
        index = self.visit(target.index, env)
        if is_signal(index):
            return index
        current: MutantObject = NULL
        if node.operator != "=":
            current = self.get_index(container, index, target)
            if is_signal(current):
                return current
        value = self.combine(node, current, env)
        if is_signal(value):
            return value
        return self.set_index(container, index, value, node)

    def assign_property(
        self, target: PropertyExpression, node: AssignmentExpression, env: Environment
    ) -> MutantObject:
        obj = self.visit(target.target, env)
        if is_signal(obj):
            return obj
        name = target.property.name
        current: MutantObject = NULL
        if node.operator != "=":
            current = self.get_property(obj, name, target)
            if is_signal(current):
                return current
        value = self.combine(node, current, env)
        if is_signal(value):
            return value
        return self.set_property(obj, name, value, node)
