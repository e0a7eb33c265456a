"""cscbuild - builds C# projects into assemblies with an external csc compiler."""

__version__ = "0.1.0"
