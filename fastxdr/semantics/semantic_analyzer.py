# fastxdr/semantics/semantic_analyzer.py
from __future__ import annotations
import logging
from typing import Optional

from fastxdr.internals.report import Reporter
from fastxdr.semantics.ast import Specification
from fastxdr.semantics.passes.collect import NamespaceCollector, SymbolTable
from fastxdr.semantics.passes.const_eval import ConstantEvaluator
from fastxdr.semantics.passes.layout import LayoutAnalyzer
from fastxdr.semantics.passes.resolve import Canonicalizer, TypeResolver
from fastxdr.semantics.passes.unions import UnionValidator
from fastxdr.semantics.type_index import TypeIndex

logger = logging.getLogger(__name__)


class SemanticAnalyzer:
    """
    Runs the analysis passes over a Specification.

    Pass execution order:
      - Pass 0: Namespace collection (constants, enum values, types)
      - Pass 1: Constant evaluation and type resolution
      - Pass 2: Cycle detection over value edges
      - Pass 3: Canonical forms, nested array check, union discriminants
      - Pass 4: Layout and opacity, producing the TypeIndex

    Each pass only runs when the previous ones reported no error; a pass
    never sees half-resolved input.
    """

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter
        self.symbols = SymbolTable()
        self.constants: dict[str, int] = {}

    def check(self, spec: Specification) -> Optional[TypeIndex]:
        """Analyze ``spec``. Returns None when any error was reported."""
        # Pass 0: names
        NamespaceCollector(self.reporter, self.symbols).collect(spec)
        logger.debug("pass 0: %d names collected", len(self.symbols.order))
        if self.reporter.has_errors:
            return None

        # Pass 1: values and type references
        evaluator = ConstantEvaluator(self.reporter, self.symbols)
        self.constants = evaluator.resolve_all()
        resolver = TypeResolver(self.reporter, self.symbols, evaluator)
        definitions = resolver.resolve(spec)
        if self.reporter.has_errors:
            return None

        # Pass 2: a type may not hold itself by value
        graph = resolver.build_graph()
        if not resolver.check_cycles(graph):
            return None

        # Pass 3: checks that need canonical (typedef-free) forms
        canon = Canonicalizer(definitions)
        resolver.check_arrays(canon)
        UnionValidator(self.reporter, self.symbols, definitions, canon).validate(spec)
        if self.reporter.has_errors:
            return None

        # Pass 4: sizes and opacity
        index = LayoutAnalyzer(definitions, graph, canon).analyze(self.constants)
        logger.debug("pass 4: %d types laid out", len(index.types))
        return index
