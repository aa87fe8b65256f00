# Scripts injected into every plugin runtime before the plugin module loads,
# and the synthetic entry module that registers and dispatches plugin rules.

HOST_OP_FUNCTION = "__lintbridgeOp"
MODULE_TABLE = "__lintbridgeModules"
AST_BUILDER = "__lintbridgeBuildAst"
ENTRY_MODULE_NAME = "__lintbridge_entry__.js"

# Host-op wrapper and module table. Replies are {"ok": value} or
# {"error": {name, message}}; errors become thrown Errors.
PRELUDE_JS = """\
(function (global) {
  const hostOp = global.%(op)s;
  global.Host = Object.freeze({
    opSync(name, args) {
      const reply = JSON.parse(hostOp(name, JSON.stringify(args)));
      if (reply.error !== undefined) {
        const err = new Error(reply.error.message);
        err.name = reply.error.name;
        throw err;
      }
      return reply.ok;
    },
  });

  const factories = new Map();
  const cache = new Map();
  function require(id) {
    if (cache.has(id)) {
      return cache.get(id);
    }
    const factory = factories.get(id);
    if (factory === undefined) {
      throw new Error("Module is not linked: " + id);
    }
    const exports = {};
    cache.set(id, exports);
    try {
      factory(require, exports);
    } catch (e) {
      cache.delete(id);
      throw e;
    }
    return exports;
  }
  global.%(table)s = Object.freeze({
    define(id, factory) {
      factories.set(id, factory);
    },
    evaluate(id) {
      require(id);
    },
  });
})(globalThis);
""" % {"op": HOST_OP_FUNCTION, "table": MODULE_TABLE}

VISITOR_JS = """\
class Visitor {
  constructor() {
    this.diagnostics = [];
  }

  static handlerName(type) {
    return "visit" + type.split("_").map((part) => part.charAt(0).toUpperCase() + part.slice(1)).join("");
  }

  static childByField(node, field) {
    for (const child of node.children) {
      if (child.field === field) {
        return child;
      }
    }
    return null;
  }

  static namedChildren(node) {
    return node.children.filter((child) => child.named);
  }

  collectDiagnostics(programAst) {
    this.diagnostics = [];
    this.visit(programAst);
    return this.diagnostics;
  }

  addDiagnostic(node, message, hint) {
    this.diagnostics.push({
      span: { lo: node.span.lo, hi: node.span.hi },
      message,
      hint: hint === undefined ? null : hint,
    });
  }

  visit(root) {
    const stack = [root];
    while (stack.length > 0) {
      const node = stack.pop();
      if (node.named) {
        const handler = this[Visitor.handlerName(node.type)];
        if (typeof handler === "function" && handler.call(this, node) === false) {
          continue;
        }
      }
      for (let i = node.children.length - 1; i >= 0; i--) {
        stack.push(node.children[i]);
      }
    }
  }

  visitChildren(node) {
    for (const child of node.children) {
      this.visit(child);
    }
  }
}
globalThis.Visitor = Visitor;
"""

# Nested AST from the flattened handoff records; parents precede children.
AST_JS = """\
globalThis.%(builder)s = function (records) {
  const nodes = [];
  for (const record of records) {
    const parent = record.parent;
    delete record.parent;
    record.children = [];
    nodes.push(record);
    if (parent >= 0) {
      nodes[parent].children.push(record);
    }
  }
  return nodes[0];
};
""" % {"builder": AST_BUILDER}

CONTROL_FLOW_JS = """\
globalThis.ControlFlow = Object.freeze({
  query(span) {
    return Host.opSync("op_query_control_flow_by_span", { span: { lo: span.lo, hi: span.hi } });
  },
  isReachable(span) {
    return this.query(span).isReachable;
  },
  stopsExecution(span) {
    return this.query(span).stopsExecution;
  },
});
"""

BOOTSTRAP_SCRIPTS = (
    ("prelude.js", PRELUDE_JS),
    ("ast.js", AST_JS),
    ("visitor.js", VISITOR_JS),
    ("control-flow.js", CONTROL_FLOW_JS),
)

_ENTRY_BODY = """\
const rules = new Map();
function registerRule(ruleClass) {
  if (typeof ruleClass !== 'function' || typeof ruleClass.ruleCode !== 'function') {
    return;
  }
  const code = ruleClass.ruleCode();
  rules.set(code, ruleClass);
  Host.opSync('op_add_rule_code', { code });
}
globalThis.runPlugins = function(programAst, ruleCodes) {
  for (const code of ruleCodes) {
    const rule = rules.get(code);
    if (rule === undefined) {
      continue;
    }
    const diagnostics = new rule().collectDiagnostics(programAst);
    Host.opSync('op_add_diagnostics', { code, diagnostics });
  }
};
registerRule(Plugin);
"""


def create_entry_source(plugin_path: str) -> str:
    """Source of the synthetic entry module; depends only on plugin_path."""
    return f"import Plugin from '{plugin_path}';\n" + _ENTRY_BODY
