"""
Classes, instances, `this`, `super` and property access.

Each method call binds two names in its call scope: `this` (the receiver)
and the class context (the class whose table supplied the running
method). `super` resolves against the class context's parent, not the
receiver's class, so a parent-level method running on a grandchild
instance still reaches the grandparent.
"""

from __future__ import annotations

import logging

from mutant.evaluators.calls import CallMixin
from mutant.evaluators.base import CLASS_CONTEXT_NAME, THIS_NAME
from mutant.mutant_ast import (
    ASTNode,
    ClassStatement,
    FunctionLiteral,
    NewExpression,
    PropertyExpression,
    SuperExpression,
    ThisExpression,
)
from mutant.mutant_callstack import FrameType
from mutant.mutant_environment import Environment
from mutant.mutant_errors import (
    ErrorKind,
    circular_inheritance,
    class_already_defined,
    no_constructor,
    no_parent_class,
    not_a_class,
    parent_method_not_found,
    parent_not_a_class,
    parent_not_found,
    property_access_unsupported,
    property_assign_unsupported,
    property_not_found,
    super_outside_class,
    this_unavailable,
)
from mutant.mutant_objects import (
    NULL,
    BoundMethod,
    ClassObject,
    ErrorObject,
    FunctionObject,
    InstanceObject,
    Method,
    MutantObject,
    StringObject,
    is_signal,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _function_from(literal: FunctionLiteral, env: Environment, name: str) -> FunctionObject:
    return FunctionObject(tuple(p.name for p in literal.parameters), literal.body, env, name)


class ClassMixin(CallMixin):
    """Class definitions, instantiation, `this`, `super` and properties.

    Methods and constructors close over a scope enclosing the one the class
    was declared in. A method remembers its defining class, and `super`
    resolves against that class's parent rather than the receiver's.
    """

    def eval_class(self, node: ClassStatement, env: Environment) -> MutantObject:
        """Builds a `ClassObject` and binds it in `env`.

        Args:
            node: The class declaration.
            env: Scope receiving the class binding.

        Returns:
            NULL, or a ClassError when the name is taken or the parent is
            missing, not a class, or would make the hierarchy circular.
        """
        name = node.name.name
        if env.contains_locally(name):
            return self.error(class_already_defined(name), node, ErrorKind.CLASS)

        parent = self.object_class
        if node.parent is not None:
            parent_name = node.parent.name
            if parent_name == name:
                return self.error(circular_inheritance(name, parent_name), node.parent, ErrorKind.CLASS)
            candidate = self.resolve_name(parent_name, env)
            if candidate is None:
                return self.error(parent_not_found(parent_name), node.parent, ErrorKind.CLASS)
            if not isinstance(candidate, ClassObject):
                return self.error(
                    parent_not_a_class(parent_name, candidate.type_name), node.parent, ErrorKind.CLASS
                )
            if any(ancestor.name == name for ancestor in candidate.lineage()):
                return self.error(circular_inheritance(name, parent_name), node.parent, ErrorKind.CLASS)
            parent = candidate

        class_env = env.enclosed()
        constructor = None
        if node.constructor is not None:
            constructor = _function_from(node.constructor, class_env, "constructor")
        methods: dict[str, Method] = {}
        for literal in node.methods:
            method_name = literal.name or "<anonymous>"
            methods[method_name] = _function_from(literal, class_env, method_name)

        cls = ClassObject(name, parent, constructor, methods, class_env)
        env.define(name, cls)
        logger.debug("Defined class %s extends %s with methods %s", name, parent.name, sorted(methods))
        return NULL

    def eval_new(self, node: NewExpression, env: Environment) -> MutantObject:
        """Creates an instance and runs the nearest constructor in its lineage.

        A class with no constructor anywhere in its chain accepts only an
        empty argument list.

        Returns:
            The new instance, or the error raised by the constructor.
        """
        cls = self.visit(node.class_ref, env)
        if is_signal(cls):
            return cls
        if not isinstance(cls, ClassObject):
            return self.error(not_a_class(cls.type_name), node, ErrorKind.CLASS)
        args = self.eval_arguments(node.arguments, env)
        if isinstance(args, MutantObject):
            return args

        instance = InstanceObject(cls)
        found = cls.find_constructor()
        if found is None:
            if args:
                return self.error(no_constructor(cls.name), node, ErrorKind.CLASS)
            return instance

        constructor, owner = found
        result = self.call_function(
            constructor,
            args,
            node,
            this=instance,
            class_context=owner,
            frame_type=FrameType.CONSTRUCTOR,
            name=f"{owner.name}.constructor",
        )
        if isinstance(result, ErrorObject):
            return result
        return instance

    def eval_this(self, node: ThisExpression, env: Environment) -> MutantObject:
        instance = env.get(THIS_NAME)
        if instance is None:
            return self.error(this_unavailable(), node, ErrorKind.CLASS)
        return instance

    def eval_super(self, node: SuperExpression, env: Environment) -> MutantObject:
        """Evaluates `super(args)` or `super.method(args)`.

        Returns:
            NULL after a parent constructor call, the parent method's result,
            or a ClassError outside a method or without a parent.
        """
        instance = env.get(THIS_NAME)
        context = env.get(CLASS_CONTEXT_NAME)
        if not isinstance(instance, InstanceObject) or not isinstance(context, ClassObject):
            return self.error(super_outside_class(), node, ErrorKind.CLASS)
        parent = context.parent
        if parent is None:
            return self.error(no_parent_class(context.name), node, ErrorKind.CLASS)

        if node.method is None:
            args = self.eval_arguments(node.arguments, env)
            if isinstance(args, MutantObject):
                return args
            found_ctor = parent.find_constructor()
            if found_ctor is None:
                if args:
                    return self.error(no_constructor(parent.name), node, ErrorKind.CLASS)
                return NULL
            constructor, owner = found_ctor
            result = self.call_function(
                constructor,
                args,
                node,
                this=instance,
                class_context=owner,
                frame_type=FrameType.CONSTRUCTOR,
                name=f"{owner.name}.constructor",
            )
            return result if isinstance(result, ErrorObject) else NULL

        found = parent.find_method(node.method)
        if found is None:
            return self.error(parent_method_not_found(node.method, parent.name), node, ErrorKind.CLASS)
        args = self.eval_arguments(node.arguments, env)
        if isinstance(args, MutantObject):
            return args
        method, owner = found
        return self.call_method(BoundMethod(instance, method, owner), args, node)

    def eval_property(self, node: PropertyExpression, env: Environment) -> MutantObject:
        target = self.visit(node.target, env)
        if is_signal(target):
            return target
        return self.get_property(target, node.property.name, node)

    def get_property(self, target: MutantObject, name: str, node: ASTNode) -> MutantObject:
        """Own properties first, then methods along the class chain."""
        if isinstance(target, InstanceObject):
            if name in target.properties:
                return target.properties[name]
            found = target.cls.find_method(name)
            if found is not None:
                method, owner = found
                return BoundMethod(target, method, owner)
            return self.error(property_not_found(name, target.cls.name), node, ErrorKind.PROPERTY)
        if isinstance(target, ClassObject):
            if name == "name":
                return StringObject(target.name)
            if name == "parent":
                return target.parent if target.parent is not None else NULL
        return self.error(property_access_unsupported(name, target.type_name), node, ErrorKind.PROPERTY)

    def set_property(
        self, target: MutantObject, name: str, value: MutantObject, node: ASTNode
    ) -> MutantObject:
        """Sets an own property; only instances accept property writes."""
        if not isinstance(target, InstanceObject):
            return self.error(property_assign_unsupported(name, target.type_name), node, ErrorKind.PROPERTY)
        target.properties[name] = value
        return value
