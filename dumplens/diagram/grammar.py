"""Lark grammar for ER diagram text.

Covers the subset produced by the generator plus the relationship and key
forms a hand-written diagram commonly uses.
"""

DIAGRAM_GRAMMAR = r"""
// --------------------
// Entry point
// --------------------
start: HEADER statement*

?statement: entity
          | relationship

// --------------------
// Entity blocks
// --------------------
entity: IDENT "{" attribute* "}"
attribute: IDENT IDENT key_list? COMMENT?
key_list: KEY ("," KEY)*

// --------------------
// Relationships: <left card><line><right card>, e.g. ||--o{
// --------------------
relationship: IDENT REL_OP IDENT ":" label
label: COMMENT
     | IDENT

// --------------------
// Terminals
// --------------------
HEADER: "erDiagram"
KEY.2: /(PK|FK|UK)(?!\w)/
REL_OP: /(\|o|\|\||\}o|\}\|)(--|\.\.)(o\||\|\||o\{|\|\{)/
IDENT: /\w[\w\-\[\]()]*/
COMMENT: /"[^"\n]*"/
DIAGRAM_COMMENT: /%%[^\n]*/

%import common.WS
%ignore WS
%ignore DIAGRAM_COMMENT
"""
