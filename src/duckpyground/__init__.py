"""DuckPyground

A playground for learning how to analyse data with DuckDB from Python.

DuckPyground accompanies a series of tutorials, published as the posts of a
static site, that explain how to use DuckDB, the embedded analytical database,
together with pandas and Apache Arrow. Each topic covered by the tutorials
is implemented as a small, self documented module in literate programming
style, so that the code shown in the posts can be run and tested.

The primary components are:

* The Engine, which covers connecting to DuckDB, querying files,
  registering and creating tables, exporting results and running analyses.
* The Posts, which reads the tutorials and verifies their front matter
  and the code they show.
* The Commands, which expose both from the shell.

For the user guide and code documentation of each component, refer to the
component itself.
"""

from . import engine, posts

__all__ = ("engine", "posts")
