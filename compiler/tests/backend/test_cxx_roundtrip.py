#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import requires_cxx
from sg_driver import SumGenDriver

pytestmark = requires_cxx


def _generate(write_rs_file, layout, name, src):
    report = SumGenDriver().generate(write_rs_file(name, src), layout)
    assert not report.has_errors(), [d.format() for d in report.result.diagnostics]
    return report


def test_sample_semantics(write_rs_file, layout, compile_and_run, temp_project):
    _generate(write_rs_file, layout, "sample", """
        enum Sample {
            Empty,
            Single(u32),
            Multiple(u16, u16),
        }
    """)

    ok, out, err = compile_and_run(layout, """
        #include <iostream>
        #include <stdexcept>
        #include <tuple>
        #include <utility>

        #include "acme/geo/sample.hpp"

        using acme::geo::Sample;

        int main() {
            Sample e = Sample::Empty();
            Sample s = Sample::Single(7);
            Sample m = Sample::Multiple(1, 2);
            std::cout << s.is_single() << e.is_empty() << m.is_multiple() << s.is_empty() << "\\n";
            std::cout << (e.single_ptr() == nullptr) << (s.single_ptr() != nullptr) << *s.single_ptr() << "\\n";
            std::cout << (s == Sample::Single(7)) << (s != Sample::Single(8)) << (s == e) << "\\n";

            std::get<1>(m.multiple_ref()) = 5;
            std::cout << cppust::as_debug(e) << " " << cppust::as_debug(s) << " " << cppust::as_debug(m) << "\\n";

            bool threw = false;
            try {
                e.single_ref();
            } catch (const std::runtime_error&) {
                threw = true;
            }
            std::cout << threw << "\\n";

            s = m;
            std::cout << s.is_multiple() << (s == m) << "\\n";
            Sample moved = std::move(s);
            std::cout << cppust::as_debug(moved) << "\\n";
            return 0;
        }
    """, temp_project)

    assert ok, err
    assert out.splitlines() == [
        "1110",
        "117",
        "110",
        "Empty Single(7) Multiple(1,5)",
        "1",
        "11",
        "Multiple(1,5)",
    ]


COUNTER_HPP = """
#pragma once

#include <ostream>
#include <stdexcept>

namespace acme { namespace geo {

struct Counter {
    static int destroyed;
    static int live;
    static bool throw_on_copy;
    int value;

    explicit Counter(int v): value(v) { live++; }
    Counter(const Counter& rhs): value(rhs.value) {
        if (throw_on_copy) {
            throw std::runtime_error("copy");
        }
        live++;
    }
    Counter& operator=(const Counter&) = default;
    ~Counter() { destroyed++; live--; }

    bool operator==(const Counter& rhs) const { return value == rhs.value; }
};

inline std::ostream& operator<<(std::ostream& os, const Counter& c) {
    return os << "#" << c.value;
}

} }
"""

EVENT_RS = """
    enum Event {
        Idle,
        Tick(Counter),
        Tock(Counter),
        Text(String),
        Raw(Vec<u8>),
    }
"""

COUNTER_STATICS = """
    int acme::geo::Counter::destroyed = 0;
    int acme::geo::Counter::live = 0;
    bool acme::geo::Counter::throw_on_copy = false;
"""


def _generate_event(write_rs_file, layout):
    _generate(write_rs_file, layout, "event", EVENT_RS)
    # user types reach the generated class through the hand-edited skeleton
    (layout.header_subdir / "counter.hpp").write_text(COUNTER_HPP)
    skeleton = layout.skeleton_path("event")
    skeleton.write_text(skeleton.read_text().replace(
        "#include <cppust/cppust.hpp>",
        "#include <cppust/cppust.hpp>\n#include \"acme/geo/counter.hpp\"",
    ))


def test_user_type_payload_lifetime(write_rs_file, layout, compile_and_run, temp_project):
    _generate_event(write_rs_file, layout)

    ok, out, err = compile_and_run(layout, """
        #include <iostream>
        #include <utility>
        #include <vector>

        #include "acme/geo/event.hpp"
    """ + COUNTER_STATICS + """
        using acme::geo::Counter;
        using acme::geo::Event;

        int main() {
            Event e = Event::Tick(Counter(1));
            int before = Counter::destroyed;
            Event& alias = e;
            e = alias;
            std::cout << (Counter::destroyed - before) << " " << e.tick_ref().value << "\\n";
            e = std::move(alias);
            std::cout << (Counter::destroyed - before) << " " << e.tick_ref().value << "\\n";

            Event a = Event::Tick(Counter(2));
            Event b = Event::Tick(Counter(3));
            before = Counter::destroyed;
            a = b;
            std::cout << (Counter::destroyed - before) << " " << a.tick_ref().value << "\\n";

            before = Counter::destroyed;
            e = Event::Idle();
            std::cout << (Counter::destroyed - before) << " " << e.is_idle() << "\\n";

            std::cout << (Event::Tick(Counter(1)) == Event::Tock(Counter(1))) << " "
                      << (Event::Tick(Counter(1)) != Event::Tock(Counter(1))) << "\\n";

            Event t = Event::Text("hi");
            Event r = Event::Raw(std::vector<cppust::u8>{10, 255});
            std::cout << cppust::as_debug(t) << " " << cppust::as_debug(r) << " "
                      << cppust::as_debug(b) << " " << cppust::as_debug(e) << "\\n";
            return 0;
        }
    """, temp_project)

    assert ok, err
    assert out.splitlines() == [
        "0 1",
        "0 1",
        "0 3",
        "1 1",
        "0 1",
        'Text("hi") Raw(<0a ff>) Tick(#3) Idle',
    ]


def test_throwing_payload_copy_keeps_object_consistent(write_rs_file, layout, compile_and_run, temp_project):
    _generate_event(write_rs_file, layout)

    ok, out, err = compile_and_run(layout, """
        #include <iostream>
        #include <stdexcept>
        #include <utility>

        #include "acme/geo/event.hpp"
    """ + COUNTER_STATICS + """
        using acme::geo::Counter;
        using acme::geo::Event;

        static void show(bool threw, const Event& ev) {
            std::cout << threw << ev.is_idle() << ev.is_tick() << ev.valueless_by_exception()
                      << (ev.tick_ptr() == nullptr) << "\\n";
        }

        int main() {
            {
                Event a = Event::Idle();
                Event b = Event::Tick(Counter(5));
                Counter::throw_on_copy = true;

                bool threw = false;
                try {
                    a = b;
                } catch (const std::runtime_error&) {
                    threw = true;
                }
                show(threw, a);

                threw = false;
                try {
                    a = std::move(b);
                } catch (const std::runtime_error&) {
                    threw = true;
                }
                show(threw, a);

                Counter::throw_on_copy = false;
                a = Event::Tick(Counter(6));
                std::cout << a.tick_ref().value << a.valueless_by_exception() << "\\n";
            }
            std::cout << Counter::live << "\\n";
            return 0;
        }
    """, temp_project)

    assert ok, err
    assert out.splitlines() == [
        # copy failed before anything was destroyed: still Idle
        "11001",
        # move failed after the old payload was destroyed: valueless, holds nothing
        "10011",
        "60",
        # every Counter constructed was destroyed exactly once
        "0",
    ]


def test_enum_without_variants_compiles(write_rs_file, layout, compile_and_run, temp_project):
    _generate(write_rs_file, layout, "never", "enum Never {}\n")

    ok, _, err = compile_and_run(layout, """
        #include "acme/geo/never.hpp"

        int main() { return 0; }
    """, temp_project)

    assert ok, err
