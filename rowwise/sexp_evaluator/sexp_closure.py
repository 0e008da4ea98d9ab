"""
Defines the Closure class for representing lexically-scoped anonymous functions
created by the 'lambda' special form in the S-expression evaluator.
"""
import logging
from typing import List, Any

from sexpdata import Symbol
from .sexp_environment import SexpEnvironment

logger = logging.getLogger(__name__)


class Closure:
    def __init__(self, params_ast: List[Symbol], body_ast: List[Any], definition_env: SexpEnvironment):
        """
        Represents a lexically-scoped anonymous function created by 'lambda'.

        Args:
            params_ast: A list of Symbol objects representing the function's formal parameters.
            body_ast: A list of AST nodes representing the function's body expressions.
            definition_env: The SexpEnvironment captured at the time of lambda definition.
                            This environment is the parent for the function's call frame.
        """
        self.params_ast: List[Symbol] = params_ast
        self.body_ast: List[Any] = body_ast
        self.definition_env: SexpEnvironment = definition_env
        logger.debug(f"Closure created: params=({', '.join(self.param_names)}), num_body_exprs={len(self.body_ast)}")

    @property
    def param_names(self) -> List[str]:
        return [p.value() for p in self.params_ast]

    def make_call_frame(self, args: List[Any]) -> SexpEnvironment:
        """Binds evaluated arguments to the parameters in a child of the definition environment."""
        return self.definition_env.extend(dict(zip(self.param_names, args)))

    def __repr__(self):
        return f"<Closure params=({', '.join(self.param_names)}) body_exprs#={len(self.body_ast)} def_env_id={id(self.definition_env)}>"
