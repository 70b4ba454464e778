"""Test Program Generator

Turns one testcase's code into a complete, instrumented C++ program:

    boilerplate (includes, value/type printing helpers)
    user header lines (usually #include of the student's code)
    void _ac_main() { ...test code with every CHECK rewritten... }
    static runner that calls _ac_main() before main()

The generated program's only contract with the grader is the result log
(see autocheck.results.result_log) and exit code 0 on normal completion.
"""

from pathlib import Path
from typing import List, Sequence, Tuple
import logging

from autocheck.checks.expression import parse_marker
from autocheck.checks.instrumentation import generate_check_code
from autocheck.checks.record import CheckRecord
from autocheck.config import CHECK_MARKER, CHECK_TYPE_MARKER
from autocheck.scanner import find_markers, to_literal

logger = logging.getLogger(__name__)


BOILERPLATE = r"""// This is a test file autogenerated by autocheck.

#include <cstdint>
#include <cstdlib>
#include <fstream>
#include <iostream>
#include <sstream>
#include <string>
#include <type_traits>
#include <typeinfo>
#include <unordered_map>
#include <vector>

// Escape a char or string so it fits on one line of the result log.
static std::string _ac_escape(char c) {
  switch (c) {
  case '\0': return "\\0";
  case '\n': return "\\n";
  case '\r': return "\\r";
  case '\t': return "\\t";
  case '\'': return "\\'";
  case '\"': return "\\\"";
  case '\\': return "\\\\";
  }
  return std::string(1, c);
}
static std::string _ac_escape(const std::string & str) {
  std::string out;
  for (char c : str) out += _ac_escape(c);
  return out;
}

template <typename T> struct _ac_is_vector : std::false_type { };
template <typename T, typename A> struct _ac_is_vector<std::vector<T,A>> : std::true_type { };

// Render a value as readable text for reports.
static std::string _ac_to_literal(char c) { return "'" + _ac_escape(c) + "'"; }
static std::string _ac_to_literal(const std::string & str) { return "\"" + _ac_escape(str) + "\""; }
static std::string _ac_to_literal(const char * str) { return _ac_to_literal(std::string(str)); }
static std::string _ac_to_literal(bool value) { return value ? "true" : "false"; }
template <typename T>
std::string _ac_to_literal(const T & value) {
  if constexpr (_ac_is_vector<T>::value) {
    std::string out = "{";
    for (size_t i = 0; i < value.size(); ++i) {
      if (i) out += ",";
      out += _ac_to_literal(value[i]);
    }
    return out + "}";
  }
  else if constexpr (requires (std::ostream & os, const T & v) { os << v; }) {
    std::stringstream ss;
    ss << value;
    return _ac_escape(ss.str());
  }
  else {
    return "[unprintable]";
  }
}

// Human-readable type names.
template <typename T> std::string _ac_type_name();

static std::string _ac_base_type_name(const std::string & in) {
  // First entry wins where platform types alias (e.g., int32_t and int).
  static const std::unordered_map<std::string, std::string> type_map = {
    { typeid(bool).name(),          "bool" },
    { typeid(char).name(),          "char" },
    { typeid(int).name(),           "int" },
    { typeid(double).name(),        "double" },
    { typeid(float).name(),         "float" },
    { typeid(size_t).name(),        "size_t" },
    { typeid(long).name(),          "long" },
    { typeid(unsigned int).name(),  "unsigned int" },
    { typeid(int8_t).name(),        "int8_t" },
    { typeid(int16_t).name(),       "int16_t" },
    { typeid(int64_t).name(),       "int64_t" },
    { typeid(uint8_t).name(),       "uint8_t" },
    { typeid(uint16_t).name(),      "uint16_t" },
    { typeid(uint64_t).name(),      "uint64_t" },
    { typeid(void).name(),          "void" },
  };
  auto it = type_map.find(in);
  return (it == type_map.end()) ? in : it->second;
}

template <typename... ARG_Ts>
std::string _ac_arg_names() {
  std::string out;
  bool first = true;
  ((out += (first ? "" : ","), out += _ac_type_name<ARG_Ts>(), first = false), ...);
  return out;
}

template <typename T> struct _ac_type_namer {
  static std::string Get() { return _ac_base_type_name(typeid(T).name()); }
};
template <typename R, typename... ARG_Ts> struct _ac_type_namer<R(ARG_Ts...)> {
  static std::string Get() { return _ac_type_name<R>() + "(" + _ac_arg_names<ARG_Ts...>() + ")"; }
};
template <typename T, typename A> struct _ac_type_namer<std::vector<T,A>> {
  static std::string Get() { return "std::vector<" + _ac_type_name<T>() + ">"; }
};
template <typename T> struct _ac_type_namer<T*> {
  static std::string Get() { return _ac_type_name<T>() + " *"; }
};
template <> struct _ac_type_namer<std::string> {
  static std::string Get() { return "std::string"; }
};

template <typename T>
std::string _ac_type_name() {
  using base_t = std::remove_cv_t<std::remove_reference_t<T>>;
  std::string name = _ac_type_namer<base_t>::Get();
  if constexpr (std::is_const_v<std::remove_reference_t<T>>) name += " const";
  if constexpr (std::is_lvalue_reference_v<T>) name += " &";
  else if constexpr (std::is_rvalue_reference_v<T>) name += " &&";
  return name;
}
"""


def process_checks(code: str, test_id: int) -> Tuple[str, List[CheckRecord]]:
    """
    Rewrite every CHECK / CHECK_TYPE marker in code into instrumentation.

    Checks are numbered densely from 0 in source order.

    Args:
        code: Test code after variable substitution
        test_id: Testcase id, for error locations

    Returns:
        (instrumented code, check records in id order)
    """
    markers = find_markers(code, (CHECK_MARKER, CHECK_TYPE_MARKER))
    checks: List[CheckRecord] = []
    out = []
    prev_end = 0
    for check_id, marker in enumerate(markers):
        location = f"Testcase #{test_id}, Line {marker.line} (check {check_id})"
        expression = parse_marker(marker.name, marker.body, location, marker.line)
        checks.append(CheckRecord(check_id, expression))

        out.append(code[prev_end:marker.start])
        out.append(generate_check_code(expression, check_id))
        prev_end = marker.end
    out.append(code[prev_end:])

    logger.debug(f"Testcase #{test_id}: instrumented {len(checks)} checks")
    return "".join(out), checks


def _format_points(points: float) -> str:
    return repr(float(points))


def generate_program(body: str, header: Sequence[str], result_filename: str,
                     points: float = 0.0, call_main: bool = True) -> str:
    """
    Assemble the full program around already-instrumented test code.

    Args:
        body: Instrumented test code (output of process_checks)
        header: Header lines, variables already filled in
        result_filename: Where the program writes its result log
        points: Logged in the SCORE line when every check passed
        call_main: If False, exit(0) before the tested program's main() runs
    """
    lines = [
        BOILERPLATE,
        "\n".join(header),
        "",
        "void _ac_main() {",
        f"  std::ofstream _ac_results({to_literal(result_filename)});",
        "  bool _ac_passed = true;",
        "  [[maybe_unused]] size_t _ac_check_count = 0;",
        "",
        body,
        "",
        f"  _ac_results << \"SCORE \" << (_ac_passed ? {_format_points(points)} : 0.0) << \"\\n\";",
        "}",
        "",
        "// Run the tests before main().",
        "struct _ac_runner {",
        "  _ac_runner() {",
        "    _ac_main();",
    ]
    if not call_main:
        lines.append("    exit(0); // Don't execute main().")
    lines.extend([
        "  }",
        "};",
        "",
        "static _ac_runner _ac_runner_instance;",
        "",
    ])
    return "\n".join(lines)


def write_program(path: Path, source: str):
    """Write generated source, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Creating: {path}")
    with open(path, "w", encoding="utf-8") as f:
        f.write(source)
