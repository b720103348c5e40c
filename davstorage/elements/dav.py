#!/usr/bin/env python
from typing import ClassVar

from .base import BaseElement
from davstorage.lib.namespace import ns


# Operations
class Propfind(BaseElement):
    tag: ClassVar[str] = ns("D", "propfind")


class Prop(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")


class Allprop(BaseElement):
    tag: ClassVar[str] = ns("D", "allprop")


# Properties
class ResourceType(BaseElement):
    tag: ClassVar[str] = ns("D", "resourcetype")


class DisplayName(BaseElement):
    tag: ClassVar[str] = ns("D", "displayname")


class GetContentLength(BaseElement):
    tag: ClassVar[str] = ns("D", "getcontentlength")


class GetContentType(BaseElement):
    tag: ClassVar[str] = ns("D", "getcontenttype")


class GetLastModified(BaseElement):
    tag: ClassVar[str] = ns("D", "getlastmodified")


class GetEtag(BaseElement):
    tag: ClassVar[str] = ns("D", "getetag")


class CreationDate(BaseElement):
    tag: ClassVar[str] = ns("D", "creationdate")


## property name -> element class, for building prop lists by name
properties = {
    cls.tag.split("}")[1]: cls
    for cls in (
        ResourceType,
        DisplayName,
        GetContentLength,
        GetContentType,
        GetLastModified,
        GetEtag,
        CreationDate,
    )
}
