import os
import sys
import traceback

from typefuzz.argument_parser.parser import parse_args
from typefuzz.core.fuzzer import (
    CampaignConfig,
    FuzzDriver,
    enable_fuzzer_debug,
    run_parallel_campaigns,
    summarize,
)
from typefuzz.errors import ConfigurationError
from typefuzz.solver.registry import make_solver
from typefuzz.utils.file_handlers import record_bug
from typefuzz.utils.random_source import fresh_seed

SEPARATOR = "-" * 46


def print_result(result):
    label = f"Test Case {result.index + 1}"
    if result.worker:
        label += f" (worker {result.worker})"
    print(label + ":")
    print(SEPARATOR)
    for i, formula in enumerate(result.formulas):
        print(f"  Constraint {i}: {formula}")
    print(f"  Satisfiability: {result.outcome}")
    if result.model:
        assignment = ", ".join(f"{name}={value}" for name, value in sorted(result.model.items()))
        print(f"  Model: {assignment}")
    if result.reference_outcome is not None:
        print(f"  Reference: {result.reference_outcome}")
    if result.bug is not None:
        print(f"  BUG: {result.bug.value}")
    print(SEPARATOR + "\n")


def print_stats(stats):
    print("=" * 46)
    print(f"Completed {stats['total']} test cases")
    for key in sorted(stats):
        if key != "total":
            print(f"  {key}: {stats[key]}")


def main(argv=None):
    arguments = parse_args(argv)
    if arguments.debug:
        enable_fuzzer_debug()

    seed = arguments.seed if arguments.seed is not None else fresh_seed()
    config = CampaignConfig(
        num_tests=arguments.tests,
        constraints_per_test=arguments.constraints,
        max_depth=arguments.max_depth,
        bool_depth=arguments.bool_depth,
        seed=seed,
        num_vars=arguments.vars,
    )
    options = arguments.solver_options()
    print(f"typefuzz: solver={arguments.solver} seed={seed}")

    # Create temporary directory if it doesn't exist
    os.makedirs(arguments.temp, exist_ok=True)

    results = []
    try:
        if arguments.processes > 1:
            results = run_parallel_campaigns(
                config, arguments.solver, arguments.processes, options, arguments.reference
            )
            for result in results:
                print_result(result)
        else:
            solver = make_solver(arguments.solver, **options)
            reference = make_solver(arguments.reference, **options) if arguments.reference else None
            for result in FuzzDriver(config, solver, reference).run():
                print_result(result)
                results.append(result)
    except ConfigurationError as e:
        print(f"typefuzz: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nbye!")
    except Exception as e:
        print(f"Error in main loop: {e}")
        print(traceback.format_exc())
        return 1

    for result in results:
        bug_dir = record_bug(arguments.temp, result, arguments.solver, arguments.reference, seed + result.worker)
        if bug_dir is not None:
            print(f"Recorded {result.bug.value} bug in {bug_dir}")

    print_stats(summarize(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
