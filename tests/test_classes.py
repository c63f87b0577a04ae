import io
from typing import Any

import pytest

from mutant.mutant_config import InterpreterConfig
from mutant.mutant_interpreter import Interpreter
from mutant.mutant_objects import ClassObject, ErrorObject, InstanceObject, MutantObject


def run(source: str, **config: Any) -> MutantObject:
    interp = Interpreter(config=InterpreterConfig(**config), output=io.StringIO())
    result = interp.run(source)
    assert not result.parse_errors, [str(e) for e in result.parse_errors]
    return result.value


def show(source: str) -> str:
    return run(source).inspect()


def error_of(source: str) -> ErrorObject:
    value = run(source)
    assert isinstance(value, ErrorObject), value.inspect()
    return value


ANIMALS = """
class Animal {
    constructor(name) { this.name = name; }
    speak() { return this.name + " makes a sound"; }
    describe() { return "I am " + this.name; }
}
class Dog extends Animal {
    constructor(name) { super(name); this.tricks = 0; }
    speak() { return super.speak() + " (woof)"; }
    learn() { this.tricks += 1; return this; }
}
"""


def test_constructor_and_method() -> None:
    assert show(ANIMALS + 'new Animal("Cat").speak();') == "Cat makes a sound"


def test_override_and_super_method() -> None:
    assert show(ANIMALS + 'new Dog("Rex").speak();') == "Rex makes a sound (woof)"


def test_inherited_method() -> None:
    assert show(ANIMALS + 'new Dog("Rex").describe();') == "I am Rex"


def test_method_chaining_returns_this() -> None:
    assert show(ANIMALS + 'let d = new Dog("Rex"); d.learn().learn(); d.tricks;') == "2"


def test_instance_inspect() -> None:
    assert show(ANIMALS + 'new Dog("Rex");') == 'Dog {name: "Rex", tricks: 0}'


def test_super_resolves_against_defining_class() -> None:
    source = """
    class A { greet() { return "A"; } }
    class B extends A { greet() { return "B" + super.greet(); } }
    class C extends B { hello() { return this.greet(); } }
    new C().hello();
    """
    assert show(source) == "BA"


def test_super_constructor_chain_three_levels() -> None:
    source = """
    class A { constructor(x) { this.a = x; } }
    class B extends A { constructor(x) { super(x + 1); this.b = x; } }
    class C extends B { constructor(x) { super(x * 10); this.c = x; } }
    let o = new C(2);
    [o.a, o.b, o.c];
    """
    assert show(source) == "[21, 20, 2]"


def test_constructor_is_inherited() -> None:
    assert show("class P { constructor(x) { this.x = x; } } class Q extends P { } new Q(7).x;") == "7"


def test_class_without_constructor() -> None:
    assert show("class E { } new E();") == "E {}"
    err = error_of("class E { } new E(1);")
    assert err.message == "No constructor found for class: E"
    assert err.kind == "ClassError"


def test_constructor_arity_error() -> None:
    err = error_of("class P { constructor(x) { this.x = x; } } new P();")
    assert err.message == "Wrong number of arguments. Expected 1, got 0"


def test_constructor_error_propagates() -> None:
    err = error_of("class P { constructor() { this.x = missing; } } new P();")
    assert err.message == "Identifier not found: missing"
    assert err.stack_trace[0].function_name == "P.constructor"


def test_super_without_parent_constructor_is_noop() -> None:
    source = "class A { } class B extends A { constructor() { super(); this.v = 1; } } new B().v;"
    assert show(source) == "1"


def test_properties_can_be_set_and_updated() -> None:
    source = """
    class Counter {
        constructor() { this.n = 1; }
        inc() { this.n += 1; return this.n; }
    }
    let c = new Counter();
    c.inc();
    c.extra = "x";
    c.inc();
    """
    assert show(source) == "3"


def test_property_shadows_method() -> None:
    assert show('class A { m() { return 1; } } let a = new A(); a.m = "own"; a.m;') == "own"


def test_bound_method_as_value() -> None:
    source = "class C { constructor() { this.v = 42; } m() { return this.v; } } let f = new C().m; f();"
    assert show(source) == "42"
    assert show("class C { m() { 1 } } new C().m;") == "<bound method C.m>"


def test_method_arity_error() -> None:
    err = error_of("class C { m(a) { a } } new C().m();")
    assert err.message == "Wrong number of arguments. Expected 1, got 0"
    assert err.kind == "ArgumentError"


def test_root_object_methods() -> None:
    assert show("class A { } let a = new A(); a.equals(a);") == "true"
    assert show("class A { } new A().equals(new A());") == "false"
    assert show("class A { } new A().toString();").startswith("A@")
    assert show("class A { } new A().getClass().name;") == "A"
    assert show("class A { } A.parent.name;") == "Object"
    assert show("class A { } type(new A().hashCode());") == "INTEGER"
    assert show("Object;") == "<class Object>"


def test_user_method_overrides_root_method() -> None:
    source = 'class P { toString() { return "P!"; } } new P().toString();'
    assert show(source) == "P!"


def test_class_values() -> None:
    value = run("class A { } class B extends A { } B;")
    assert isinstance(value, ClassObject)
    assert value.parent is not None and value.parent.name == "A"
    assert show("class A { } A.name;") == "A"
    assert show("class A { } A;") == "<class A extends Object>"
    assert isinstance(run("class A { } new A();"), InstanceObject)


def test_class_name_prefix_is_not_circular() -> None:
    assert show("class AB { } class A extends AB { } new A();") == "A {}"


@pytest.mark.parametrize(
    "source,message",
    [
        ("class A extends A { }", "Circular inheritance detected: A cannot extend A"),
        (
            "class A { } { class B extends A { } { class A extends B { } } }",
            "Circular inheritance detected: A cannot extend B",
        ),
        ("class B extends Missing { }", "Parent class not found: Missing"),
        ("let N = 5; class B extends N { }", "Cannot extend 'N': INTEGER is not a class"),
        ("class A { } class A { }", "Class 'A' is already defined in this scope"),
        ("class K { } K();", "Class 'K' must be instantiated with 'new'"),
        ("let x = 5; new x();", "Cannot instantiate non-class object: INTEGER"),
        ("this;", "'this' is not available in this context"),
        ("fn f() { return super.x(); } f();", "'super' can only be used inside a class method"),
        ("class A { m() { return super.m(); } } new A().m();", "Method 'm' not found in parent class 'Object'"),
        ("class A { } new A().zzz;", "Property 'zzz' not found on instance of A"),
        ("let x = 5; x.y;", "Cannot access property 'y' on INTEGER"),
        ("let x = 5; x.y = 1;", "Cannot set property 'y' on INTEGER"),
        ("class A { } new A().missing();", "Property 'missing' not found on instance of A"),
    ],
)
def test_class_errors(source: str, message: str) -> None:
    assert error_of(source).message == message


def test_methods_close_over_defining_scope() -> None:
    source = """
    let prefix = ">";
    class Tag { label(s) { return prefix + s; } }
    prefix = ">>";
    new Tag().label("x");
    """
    assert show(source) == ">>x"


def test_method_error_has_method_frame() -> None:
    err = error_of("class A { boom() { return 1 + null; } }\nnew A().boom();")
    assert err.stack_trace[0].function_name == "A.boom"
    assert "[Method]" in err.detailed()


def test_cyclic_instances_print() -> None:
    source = """
    class Node { constructor(v) { this.v = v; } }
    let a = new Node(1);
    let b = new Node(2);
    a.next = b;
    b.prev = a;
    println(a);
    """
    out = io.StringIO()
    result = Interpreter(output=out).run(source)
    assert result.ok
    assert out.getvalue() == "Node {v: 1, next: Node {v: 2, prev: Node {...}}}\n"
