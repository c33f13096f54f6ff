from __future__ import annotations

import json
import re
from collections.abc import Sequence

from ..errors import RenderError
from ..protocol import SENTINEL

PROGRAM_FILENAME = "prog.go"
PACKAGE_ALIAS = "pkg_"

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _go_quote(s: str) -> str:
    # JSON string literals are valid Go interpreted string literals as long as
    # non-ASCII text is emitted raw (Go rejects \u surrogate pairs).
    return json.dumps(s, ensure_ascii=False)


def render_program(import_path: str, symbols: Sequence[str]) -> str:
    """Render the Go source of a probe that reflects on `symbols` in `import_path`.

    The probe prints the sentinel line followed by a MessagePack Package whose
    interfaces follow the order of `symbols`. Output depends only on the
    arguments.
    """
    if not import_path:
        raise RenderError("import path must not be empty")
    symbols = list(symbols)
    if not symbols:
        raise RenderError("at least one symbol is required")
    for sym in symbols:
        if not isinstance(sym, str) or not _IDENT_RE.fullmatch(sym):
            raise RenderError(f"symbol must be a Go identifier (got {sym!r})")

    entries = [
        f"        {{{_go_quote(sym)}, reflect.TypeOf((*{PACKAGE_ALIAS}.{sym})(nil)).Elem()}},"
        for sym in symbols
    ]

    src = "\n".join(
        [
            "package main",
            "",
            "import (",
            '    "bytes"',
            '    "encoding/binary"',
            '    "fmt"',
            '    "math"',
            '    "os"',
            '    "path"',
            '    "reflect"',
            '    "sort"',
            '    "strings"',
            "",
            f"    {PACKAGE_ALIAS} {_go_quote(import_path)}",
            ")",
            "",
            "func main() {",
            "    its := []struct {",
            "        sym string",
            "        typ reflect.Type",
            "    }{",
            *entries,
            "    }",
            "",
            "    interfaces := []interface{}{}",
            "    for _, it := range its {",
            "        intf, err := interfaceValue(it.sym, it.typ)",
            "        if err != nil {",
            '            fmt.Fprintf(os.Stderr, "Reflection: %v\\n", err)',
            "            os.Exit(1)",
            "        }",
            "        interfaces = append(interfaces, intf)",
            "    }",
            "",
            "    pkg := map[string]interface{}{",
            "        // NOTE: wrong when the package name is not the last element of",
            "        // the import path; reflect does not expose the package name.",
            f'        "name":       path.Base({_go_quote(import_path)}),',
            '        "interfaces": interfaces,',
            "    }",
            "",
            "    var buf bytes.Buffer",
            "    pack(&buf, pkg)",
            f'    fmt.Println("\\n{SENTINEL}")',
            "    if _, err := os.Stdout.Write(buf.Bytes()); err != nil {",
            '        fmt.Fprintf(os.Stderr, "write package: %v\\n", err)',
            "        os.Exit(1)",
            "    }",
            "}",
            "",
        ]
    )
    return src + _MODEL_GO_SOURCE


# Model construction and a minimal MessagePack writer. Stdlib-only so the probe
# builds without module downloads; map keys are written sorted.
_MODEL_GO_SOURCE = r'''
func interfaceValue(name string, t reflect.Type) (map[string]interface{}, error) {
    if t.Kind() != reflect.Interface {
        return nil, fmt.Errorf("%v is not an interface", t)
    }
    methods, err := methodValues(t)
    if err != nil {
        return nil, err
    }
    return map[string]interface{}{"name": name, "methods": methods}, nil
}

func methodValues(t reflect.Type) ([]interface{}, error) {
    methods := []interface{}{}
    for i := 0; i < t.NumMethod(); i++ {
        m := t.Method(i)
        fn, err := funcValue(m.Type)
        if err != nil {
            return nil, fmt.Errorf("method %v: %v", m.Name, err)
        }
        fn["name"] = m.Name
        methods = append(methods, fn)
    }
    return methods, nil
}

func funcValue(t reflect.Type) (map[string]interface{}, error) {
    nin := t.NumIn()
    if t.IsVariadic() {
        nin--
    }
    in := []interface{}{}
    for i := 0; i < nin; i++ {
        p, err := paramValue(t.In(i))
        if err != nil {
            return nil, err
        }
        in = append(in, p)
    }
    var variadic interface{}
    if t.IsVariadic() {
        p, err := paramValue(t.In(nin).Elem())
        if err != nil {
            return nil, err
        }
        variadic = p
    }
    out := []interface{}{}
    for i := 0; i < t.NumOut(); i++ {
        p, err := paramValue(t.Out(i))
        if err != nil {
            return nil, err
        }
        out = append(out, p)
    }
    return map[string]interface{}{"in": in, "out": out, "variadic": variadic}, nil
}

func paramValue(t reflect.Type) (interface{}, error) {
    tt, err := typeValue(t)
    if err != nil {
        return nil, err
    }
    return map[string]interface{}{"name": "", "type": tt}, nil
}

func importPath(imp string) string {
    if i := strings.LastIndex(imp, "/vendor/"); i >= 0 {
        return imp[i+len("/vendor/"):]
    }
    return imp
}

func typeValue(t reflect.Type) (map[string]interface{}, error) {
    if t.Kind() == reflect.UnsafePointer {
        return map[string]interface{}{"kind": "named", "package": "unsafe", "type": "Pointer"}, nil
    }
    if t.Name() != "" {
        if t.PkgPath() == "" {
            return map[string]interface{}{"kind": "predeclared", "name": t.Name()}, nil
        }
        return map[string]interface{}{"kind": "named", "package": importPath(t.PkgPath()), "type": t.Name()}, nil
    }

    switch t.Kind() {
    case reflect.Ptr:
        elem, err := typeValue(t.Elem())
        if err != nil {
            return nil, err
        }
        return map[string]interface{}{"kind": "pointer", "elem": elem}, nil
    case reflect.Array, reflect.Slice:
        elem, err := typeValue(t.Elem())
        if err != nil {
            return nil, err
        }
        n := -1
        if t.Kind() == reflect.Array {
            n = t.Len()
        }
        return map[string]interface{}{"kind": "array", "len": n, "elem": elem}, nil
    case reflect.Map:
        key, err := typeValue(t.Key())
        if err != nil {
            return nil, err
        }
        value, err := typeValue(t.Elem())
        if err != nil {
            return nil, err
        }
        return map[string]interface{}{"kind": "map", "key": key, "value": value}, nil
    case reflect.Chan:
        elem, err := typeValue(t.Elem())
        if err != nil {
            return nil, err
        }
        dir := 0
        switch t.ChanDir() {
        case reflect.RecvDir:
            dir = 1
        case reflect.SendDir:
            dir = 2
        }
        return map[string]interface{}{"kind": "chan", "dir": dir, "elem": elem}, nil
    case reflect.Func:
        fn, err := funcValue(t)
        if err != nil {
            return nil, err
        }
        fn["kind"] = "func"
        return fn, nil
    case reflect.Struct:
        fields := []interface{}{}
        for i := 0; i < t.NumField(); i++ {
            f := t.Field(i)
            ft, err := typeValue(f.Type)
            if err != nil {
                return nil, err
            }
            fields = append(fields, map[string]interface{}{"name": f.Name, "type": ft, "embedded": f.Anonymous})
        }
        return map[string]interface{}{"kind": "struct", "fields": fields}, nil
    case reflect.Interface:
        methods, err := methodValues(t)
        if err != nil {
            return nil, err
        }
        return map[string]interface{}{"kind": "interface", "methods": methods}, nil
    }
    return nil, fmt.Errorf("can't yet turn %v (%v) into a model type", t, t.Kind())
}

func pack(buf *bytes.Buffer, v interface{}) {
    switch x := v.(type) {
    case nil:
        buf.WriteByte(0xc0)
    case bool:
        if x {
            buf.WriteByte(0xc3)
        } else {
            buf.WriteByte(0xc2)
        }
    case int:
        packInt(buf, int64(x))
    case string:
        packHeader(buf, len(x), 0xa0, 31, 0xd9, 0xda, 0xdb)
        buf.WriteString(x)
    case []interface{}:
        packHeader(buf, len(x), 0x90, 15, 0, 0xdc, 0xdd)
        for _, item := range x {
            pack(buf, item)
        }
    case map[string]interface{}:
        keys := make([]string, 0, len(x))
        for k := range x {
            keys = append(keys, k)
        }
        sort.Strings(keys)
        packHeader(buf, len(x), 0x80, 15, 0, 0xde, 0xdf)
        for _, k := range keys {
            pack(buf, k)
            pack(buf, x[k])
        }
    default:
        panic(fmt.Sprintf("msgpack: unsupported value %T", v))
    }
}

func packHeader(buf *bytes.Buffer, n int, fix byte, fixMax int, c8, c16, c32 byte) {
    switch {
    case n <= fixMax:
        buf.WriteByte(fix | byte(n))
    case c8 != 0 && n <= math.MaxUint8:
        buf.WriteByte(c8)
        buf.WriteByte(byte(n))
    case n <= math.MaxUint16:
        buf.WriteByte(c16)
        binary.Write(buf, binary.BigEndian, uint16(n))
    default:
        buf.WriteByte(c32)
        binary.Write(buf, binary.BigEndian, uint32(n))
    }
}

func packInt(buf *bytes.Buffer, n int64) {
    switch {
    case n >= 0 && n <= 0x7f:
        buf.WriteByte(byte(n))
    case n < 0 && n >= -32:
        buf.WriteByte(byte(int8(n)))
    default:
        buf.WriteByte(0xd3)
        binary.Write(buf, binary.BigEndian, n)
    }
}
'''
