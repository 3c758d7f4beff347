"""Unit tests for Java skeleton generation."""

import pytest

from go_to_java.core.generator import (
    EMPTY_UNIT_MARKER,
    MARKER,
    GenerationOptions,
    JavaGenerator,
    generate_function_class,
    generate_method,
    generate_result_class,
    generate_unit,
    result_fields,
    unit_class_name,
)
from go_to_java.core.parsing import parse_declaration, parse_unit
from go_to_java.core.typemap import TypeMapper
from go_to_java.core.typeref import parse_type_ref
from go_to_java.models import (
    DependencyGraph,
    Field,
    Function,
    Interface,
    MethodSignature,
    NamedType,
    Parameter,
    ParseFailure,
    PointerType,
    PrimitiveType,
    Resolution,
    ResolvedNode,
    SliceType,
    SourceUnit,
    Struct,
    TypeDefinition,
    Variable,
)

INT = PrimitiveType(name="int")
STRING = PrimitiveType(name="string")
FLOAT64 = PrimitiveType(name="float64")
ERROR = PrimitiveType(name="error")


def _stats() -> Function:
    return Function(
        name="Stats",
        parameters=[Parameter(name="xs", type=SliceType(elem=FLOAT64))],
        results=[FLOAT64, FLOAT64, ERROR],
        result_names=["min", "max", "err"],
    )


class TestGenerateUnit:
    """Tests for whole-file rendering."""

    def test_user_service(self, user_service_source: str) -> None:
        java = generate_unit(parse_unit(user_service_source))

        assert "public class Service {" in java
        assert "import java.util.*;" in java
        assert "import java.time.Instant;" in java
        assert "import java.io.InputStream;" in java
        assert "public static final int MAX_RETRIES = 3;" in java
        assert "public static Duration defaultTimeout /* TODO: initialize */;" in java
        assert "public static class User {" in java
        assert 'private long id;  // Go tag: json:"id"' in java
        assert "private Map<String, Integer> meta;" in java
        assert "public long getID() {" in java
        assert "public void setCreatedAt(Instant createdAt) {" in java
        assert "public void validate() throws Exception {" in java
        assert "public interface Store {" in java
        assert "User get(Object ctx, long id) throws Exception;" in java
        assert "public static double divide(double a, double b) throws Exception {" in java
        assert "public static long copy(OutputStream dst, InputStream src) throws Exception {" in java

    def test_user_service_scanner_matches_tree_sitter(self, user_service_source: str) -> None:
        assert generate_unit(parse_unit(user_service_source, "scanner")) == generate_unit(
            parse_unit(user_service_source, "tree-sitter")
        )

    def test_empty_unit(self) -> None:
        java = generate_unit(SourceUnit(package="p"))
        assert java.startswith(EMPTY_UNIT_MARKER)
        assert "public class P {" in java

    def test_empty_unit_without_package_uses_default_name(self) -> None:
        assert "public class GoConverter {" in generate_unit(SourceUnit())

    def test_class_name_option(self) -> None:
        unit = SourceUnit(package="p", constants=[Variable(name="A", type=INT, value="1", is_const=True)])
        assert "public class Custom {" in generate_unit(unit, options=GenerationOptions(class_name="Custom"))

    def test_class_name_never_shadows_nested_type(self) -> None:
        unit = SourceUnit(package="models", structs=[Struct(name="User")])
        assert unit_class_name(unit, GenerationOptions(class_name="User")) == "UserGo"
        graph = DependencyGraph(external_structs=[Struct(name="Models")])
        assert unit_class_name(unit, GenerationOptions(), graph) == "ModelsGo"
        assert "public class ModelsGo {" in generate_unit(unit, enrichment=graph)

    def test_failures_are_marked(self) -> None:
        unit = SourceUnit(
            package="p",
            functions=[Function(name="Ok")],
            failures=[ParseFailure(line=2, text="type Broken", reason="unrecognized type declaration")],
        )
        java = generate_unit(unit)
        assert f"{MARKER} skipped declaration at line 3: unrecognized type declaration" in java
        assert "public static void ok() {" in java

    def test_unresolved_types_are_flagged(self) -> None:
        unit = SourceUnit(
            package="main",
            structs=[Struct(name="Server", fields=[Field(name="Owner", type=NamedType(package="models", name="User"))])],
        )
        assert "private User owner;  // unresolved Go type: models.User" in generate_unit(unit)

    def test_enrichment_adds_external_types(self) -> None:
        unit = SourceUnit(
            package="main",
            structs=[Struct(name="Server", fields=[Field(name="Owner", type=NamedType(package="models", name="User"))])],
        )
        graph = DependencyGraph(external_structs=[Struct(name="User", fields=[Field(name="Name", type=STRING)])])
        java = generate_unit(unit, enrichment=graph)
        assert "private User owner;\n" in java
        assert "// External types resolved from other Go files" in java
        assert "public static class User {" in java
        assert "private String name;" in java

    def test_external_types_can_be_suppressed(self) -> None:
        unit = SourceUnit(package="main", functions=[Function(name="Run")])
        graph = DependencyGraph(external_structs=[Struct(name="User")])
        java = generate_unit(unit, enrichment=graph, options=GenerationOptions(emit_external_types=False))
        assert "class User" not in java

    def test_options_disable_sections(self, user_service_source: str) -> None:
        options = GenerationOptions(emit_constructors=False, emit_getters_setters=False, emit_doc_comments=False)
        java = generate_unit(parse_unit(user_service_source), options=options)
        assert "/**" not in java
        assert "public User() {}" not in java
        assert "getName" not in java

    def test_learning_notes(self, user_service_source: str) -> None:
        java = generate_unit(parse_unit(user_service_source), options=GenerationOptions(emit_learning_notes=True))
        assert "Go to Java Conversion Notes:" in java
        assert "Go slices are mapped to Java List<T> (dynamic arrays)" in java
        assert "Go time.Time maps to Java Instant for point-in-time representation" in java

    def test_multiple_results_produce_result_class(self) -> None:
        java = generate_unit(SourceUnit(package="stats", functions=[_stats()]))
        assert "public static StatsResult stats(List<Double> xs) throws Exception {" in java
        assert "return new StatsResult();" in java
        assert "public static class StatsResult {" in java
        assert "private double min;" in java

    def test_embedded_field_is_composed(self) -> None:
        admin = Struct(
            name="Admin",
            fields=[
                Field(name="User", type=PointerType(elem=NamedType(name="User")), embedded=True),
                Field(name="Level", type=INT, exported=True),
            ],
        )
        java = generate_unit(SourceUnit(package="p", structs=[admin, Struct(name="User")]))
        assert "private User user;  // embedded Go type *User" in java
        assert "extends" not in java
        assert "getUser" not in java
        assert "public int getLevel() {" in java

    def test_interface_embedding(self) -> None:
        iface = Interface(
            name="ReadStore",
            embedded=["io.Reader", "Store"],
            methods=[MethodSignature(name="Close", results=[ERROR])],
        )
        java = generate_unit(SourceUnit(package="p", interfaces=[iface, Interface(name="Store")]))
        assert "public interface ReadStore extends Store {" in java
        assert "// embeds Go io.Reader (InputStream)" in java
        assert "void close() throws Exception;" in java

    def test_values(self) -> None:
        unit = SourceUnit(
            package="p",
            constants=[
                Variable(name="Big", type=PrimitiveType(name="int64"), value="10", is_const=True),
                Variable(name="Pattern", type=STRING, value='`a"b`', is_const=True),
            ],
            variables=[Variable(name="Timeout", value="5 * time.Second")],
        )
        java = generate_unit(unit)
        assert "public static final long BIG = 10L;" in java
        assert 'public static final String PATTERN = "a\\"b";' in java
        assert "public static Object timeout /* TODO: initialize from Go expression: 5 * time.Second */;" in java


class TestGenerateMethod:
    def test_static_function(self) -> None:
        fn = Function(name="Add", parameters=[Parameter(name="a", type=INT), Parameter(name="b", type=INT)], results=[INT])
        java = generate_method(fn)
        assert java.startswith("/**")
        assert " * Converted from Go function: Add" in java
        assert " * @param a int value" in java
        assert "public static int add(int a, int b) {" in java
        assert "return 0;" in java

    def test_variadic_and_unnamed(self) -> None:
        fn = Function(
            name="Log",
            parameters=[
                Parameter(name="", type=STRING),
                Parameter(name="args", type=SliceType(elem=PrimitiveType(name="any"), variadic=True)),
            ],
        )
        java = generate_method(fn, GenerationOptions(emit_doc_comments=False))
        assert java.splitlines()[0] == "public static void log(String arg0, Object... args) {"

    def test_method_is_not_static(self) -> None:
        fn = Function(
            name="Start",
            is_method=True,
            receiver=Parameter(name="s", type=PointerType(elem=NamedType(name="Server"))),
            results=[ERROR],
        )
        java = generate_method(fn)
        assert " * Converted from Go method: Server.Start" in java
        assert " * @throws Exception if operation fails" in java
        assert "public void start() throws Exception {" in java
        assert 'throw new UnsupportedOperationException("Not implemented");' in java

    def test_errors_as_values(self) -> None:
        fn = Function(name="Close", results=[ERROR])
        java = generate_method(fn, GenerationOptions(errors_as_exceptions=False, emit_doc_comments=False))
        assert "throws" not in java


class TestResultClasses:
    def test_named_results_become_fields(self) -> None:
        assert [name for name, _ in result_fields(_stats())] == ["min", "max"]

    def test_unnamed_results_are_numbered(self) -> None:
        fn = Function(name="Pair", results=[INT, STRING])
        assert [name for name, _ in result_fields(fn)] == ["value1", "value2"]
        java = generate_result_class(fn)
        assert "public static class PairResult {" in java
        assert "private int value1;" in java
        assert "public String getValue2() {" in java

    def test_single_value_needs_no_wrapper(self) -> None:
        assert generate_result_class(Function(name="Get", results=[INT, ERROR])) == ""

    def test_function_class(self) -> None:
        java = generate_function_class(_stats(), GenerationOptions(class_name="Stats"))
        assert "public class Stats {" in java
        assert "public static class StatsResult {" in java
        assert java.index("stats(") < java.index("class StatsResult")


class TestGuard:
    def test_failed_render_becomes_marker(self) -> None:
        def broken() -> list[str]:
            raise RuntimeError("bad input")

        gen = JavaGenerator(TypeMapper(), GenerationOptions())
        assert gen.guard("struct", "X", broken) == [f"{MARKER} skipped struct X: bad input"]


class TestTranslationScenarios:
    """Whole declarations through parse and generate."""

    def test_add_with_error(self) -> None:
        fn = parse_declaration("func add(a int, b int) (int, error)")
        assert fn is not None
        java = generate_method(fn, GenerationOptions(emit_doc_comments=False))
        assert java.splitlines()[0] == "public static int add(int a, int b) throws Exception {"
        assert "return 0;" in java

    def test_variadic_sum_uses_unboxed_varargs(self) -> None:
        fn = parse_declaration("func sum(numbers ...int) int")
        assert fn is not None
        java = generate_method(fn, GenerationOptions(emit_doc_comments=False))
        assert java.splitlines()[0] == "public static int sum(int... numbers) {"

    def test_embedded_reader_is_composed(self) -> None:
        unit = parse_unit("package p\n\ntype Buffered struct {\n    *bufio.Reader\n    Name string\n}\n")
        java = generate_unit(unit)
        assert "private BufferedReader reader;  // embedded Go type *bufio.Reader" in java
        assert "private String name;" in java
        assert "public String getName() {" in java
        assert "public void setName(String name) {" in java
        assert "extends" not in java

    @pytest.mark.parametrize("count", [0, 1, 2, 3])
    def test_result_wrapper_law(self, count: int) -> None:
        fn = Function(name="Many", results=[INT] * count + [ERROR])
        java = generate_result_class(fn)
        if count <= 1:
            assert java == ""
        else:
            assert java.count("private int value") == count
            assert java.count("public int getValue") == count
            assert java.count("public void setValue") == count

    @pytest.mark.parametrize("go", ["[]int", "map[int64]bool", "[]map[string]float64", "map[rune][]*byte"])
    def test_containers_never_hold_unboxed_primitives(self, go: str) -> None:
        text = TypeMapper().map(parse_type_ref(go)).text
        inner = text[text.index("<") :]
        for primitive in ("int", "long", "boolean", "double", "char", "byte", "float", "short"):
            assert f"<{primitive}" not in inner
            assert f" {primitive}>" not in inner
            assert f" {primitive}," not in inner


class TestUnresolvedFlags:
    """Names with no mapping and no declaration are passed through and flagged."""

    def test_package_variable(self) -> None:
        unit = parse_unit('package app\n\nimport "example.com/x/cfg"\n\nvar Default cfg.Config\n')
        java = generate_unit(unit)
        assert "public static Config default_ /* TODO: initialize */;  // unresolved Go type: cfg.Config" in java

    def test_declared_type_is_not_flagged(self) -> None:
        unit = SourceUnit(
            package="p",
            structs=[Struct(name="Mode")],
            variables=[Variable(name="Current", type=NamedType(name="Mode"))],
        )
        assert "public static Mode current /* TODO: initialize */;\n" in generate_unit(unit)

    def test_embedded_field(self) -> None:
        unit = SourceUnit(
            package="p",
            structs=[
                Struct(
                    name="Admin",
                    fields=[
                        Field(
                            name="User",
                            type=PointerType(elem=NamedType(package="models", name="User")),
                            embedded=True,
                        )
                    ],
                )
            ],
        )
        java = generate_unit(unit)
        assert "private User user;  // embedded Go type *models.User; unresolved Go type: models.User" in java


class TestTypeDefinitionChains:
    """Defined types expand through other local definitions."""

    SOURCE = """package ids

type ID int64

type UserID ID

func Find(ids []UserID, u UserID) UserID {
    return u
}
"""

    @pytest.mark.parametrize("parser", ["scanner", "tree-sitter"])
    def test_chain_expands_to_primitive(self, parser: str) -> None:
        java = generate_unit(parse_unit(self.SOURCE, parser), options=GenerationOptions(emit_doc_comments=False))
        assert "public static long find(List<Long> ids, long u) {" in java
        assert "return 0;" in java
        assert "UserID" not in java.split("public class Ids {", 1)[1]

    def test_alias_of_struct_renders_the_struct(self) -> None:
        unit = SourceUnit(
            package="p",
            structs=[Struct(name="User")],
            type_definitions=[TypeDefinition(name="Admin", underlying=NamedType(name="User"))],
            functions=[Function(name="Promote", parameters=[Parameter(name="a", type=NamedType(name="Admin"))])],
        )
        java = generate_unit(unit, options=GenerationOptions(emit_doc_comments=False))
        assert "public static void promote(User a) {" in java


class TestResolvedPackages:
    def test_dot_imported_stdlib_type_uses_cross_reference(self) -> None:
        unit = parse_unit('package jobs\n\nimport . "time"\n\nvar Started Time\n')
        graph = DependencyGraph(
            nodes=[ResolvedNode(type=NamedType(name="Time", resolution=Resolution(package_path="time")))]
        )
        java = generate_unit(unit, enrichment=graph)
        assert "import java.time.Instant;" in java
        assert "public static Instant started /* TODO: initialize */;\n" in java


def test_field_named_class_keeps_object_get_class_intact() -> None:
    unit = SourceUnit(package="p", structs=[Struct(name="Course", fields=[Field(name="Class", type=STRING)])])
    java = generate_unit(unit)
    assert "private String class_;" in java
    assert "public String getClass_() {" in java
    assert "public void setClass_(String class_) {" in java
    assert "getClass()" not in java
