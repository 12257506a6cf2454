# loxwalk

`loxwalk` holds the lexer, syntax tree, name resolver and tree-walking
interpreter for Lox, a small dynamically typed language with functions,
closures and classes with single inheritance.

## Modules

- `loxwalk.span`: `CodePosition` (byte offset plus 1-based line and column)
  and `Span` (a range between two positions). `CodePosition.from_byte_pos`
  computes line and column for an offset. `Span.to` joins two spans, and
  `Span.extract_string` returns the text a span covers.
- `loxwalk.tokens`: `TokenKind`, `Token` (a kind with an optional value),
  `SpannedToken` and `keyword_kind(word)`.
- `loxwalk.cursor`: `Cursor`, a character cursor that tracks line and column.
- `loxwalk.lexer`: `Lexer` and `lex(source)`. `lex` returns every token before
  end of file. Problems such as an unterminated string or an unexpected
  character are returned as `TokenKind.ERROR` tokens, not raised.
- `loxwalk.ast`: the syntax tree. It has expression classes (`Literal`,
  `BinOp`, `UnaryOp`, `Logical`, `Variable`, `Assignment`, `Call`, `Get`,
  `Set`, `This`, `Super`), statement classes (`ExpressionStmt`, `PrintStmt`,
  `VarDecl`, `Block`, `IfElse`, `While`, `For`, `FunctionDecl`, `Return`,
  `ClassDecl`) and `Tree`. `lispy_string(expr)` renders an expression in a
  parenthesised prefix form.
- `loxwalk.precedence`: `Precedence`, `Associativity` and `InfixOperator`.
  `InfixOperator.from_token(token)` returns the infix operator a token starts,
  or None. `InfixOperator.exceeds(min_precedence)` says whether the operator
  binds more tightly than a given level.
- `loxwalk.errors`: `ParseError`, `ErrorKind` and `Item`.
  `ParseError.render(source)` formats a syntax error as `Error at 'x': ...`,
  or as `Error at end: ...` when the error is at end of input.
- `loxwalk.treewalk.nodes`: the resolved tree. Each variable use carries a
  `VariableRef`, whose `hops` is the number of scopes out, or None for a
  global.
- `loxwalk.treewalk.resolver`: `resolve(tree)` and `Resolver`. They turn an
  `ast.Tree` into a `nodes.Tree`. A `for` loop is rewritten as a `while`.
  Scoping rules are checked: no `return` at top level, no value returned from
  `init`, no `this` outside a class, no `super` outside a subclass, no class
  inheriting from itself, no local variable redefined or read in its own
  initializer. The first violation raises `ResolveError`, which carries a
  `ResolveErrorKind`.
- `loxwalk.treewalk.runtime`: values, `Environment`, `BuiltinFunction`,
  `LoxFunction`, `LoxClass` and `LoxInstance`. It also defines the runtime
  errors `IllegalBinaryOperation`, `IllegalUnaryOperation`,
  `UndefinedVariable`, `DivideByZero`, `WrongArity`, `NotCallable`,
  `NotAnInstance`, `NotAClass` and `NoSuchProperty`, which are all subclasses
  of `LoxRuntimeError`.
- `loxwalk.treewalk.interpreter`: `Interpreter(output=None)`, which evaluates
  resolved statements and writes `print` output to `output` (stdout by
  default). Globals persist between calls.

## Running a program

The package does not parse Lox source into a syntax tree, and it has no
command-line program. You build a tree from the classes in `loxwalk.ast`,
resolve it, and hand it to the interpreter:

```python
import io

from loxwalk import ast
from loxwalk.treewalk.interpreter import Interpreter
from loxwalk.treewalk.resolver import resolve

x = ast.Identifier("x")
tree = ast.Tree([
    ast.VarDecl(x, ast.Literal(40.0)),
    ast.PrintStmt(ast.BinOp(ast.BinaryOperator.ADD, ast.Variable(x), ast.Literal(2.0))),
])

out = io.StringIO()
Interpreter(out).eval_statements(resolve(tree).statements)
print(out.getvalue(), end="")  # Number(42)
```

`print` writes values in a tagged form: `Number(42)`, `Boolean(true)`,
`String("hi")`, `Nil`, `LoxFunction(<function f>)`, `LoxClass(<class A>)`,
`LoxInstance(<instance of A>)` and `BuiltInFunction(<built-in clock>)`.

## Numbers

The interpreter uses whole numbers. Numeric literals are truncated to
integers when they are evaluated, and results wrap around in the signed 64-bit
range. Division truncates toward zero. Dividing by zero raises `DivideByZero`.

## Lexing

```python
from loxwalk.lexer import lex

for spanned in lex('var greeting = "hello";'):
    print(spanned.token.kind, spanned.token.value)
```

## Positions

```python
from loxwalk.span import CodePosition, Span

source = "first line\nsecond line"
start = CodePosition.from_byte_pos(source, 11)
end = CodePosition.from_byte_pos(source, 17)

print(start.line_no, start.column_no)          # 2 1
print(Span(start, end).extract_string(source))  # second
```

## Built-ins

The global environment provides one built-in function, `clock()`. It returns
the current Unix time in whole seconds.